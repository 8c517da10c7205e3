"""Per-agent credential profile store backed by a JSON file."""

import asyncio
import contextlib
import json
import os
import tempfile
from pathlib import Path
from typing import Any

from pydantic import BaseModel, Field, TypeAdapter, ValidationError

from provider_connect.core.logging import get_logger
from provider_connect.core.provider_ids import normalize_provider_id

from .exceptions import CredentialsInvalidError, CredentialsStorageError
from .models import AuthProfileCredential


logger = get_logger(__name__)

AUTH_PROFILES_FILENAME = "auth-profiles.json"
AUTH_PROFILES_VERSION = 1

_credential_adapter: TypeAdapter[Any] = TypeAdapter(AuthProfileCredential)


class AuthProfileData(BaseModel):
    """On-disk layout of the profile store."""

    version: int = AUTH_PROFILES_VERSION
    profiles: dict[str, AuthProfileCredential] = Field(default_factory=dict)


class AuthProfileStore:
    """Credential profiles for one agent directory.

    Every write replaces the file atomically; there is no in-memory cache, so
    each call sees what the previous write left on disk.
    """

    def __init__(self, agent_dir: str | Path):
        self.agent_dir = Path(agent_dir).expanduser()
        self.file_path = self.agent_dir / AUTH_PROFILES_FILENAME

    def _read(self) -> AuthProfileData:
        try:
            raw = self.file_path.read_text(encoding="utf-8")
        except FileNotFoundError:
            return AuthProfileData()
        except OSError as e:
            logger.error(
                "auth_profiles_read_failed",
                path=str(self.file_path),
                error=str(e),
                exc_info=e,
            )
            raise CredentialsStorageError(
                f"Error accessing auth profiles {self.file_path}: {e}"
            ) from e

        try:
            return AuthProfileData.model_validate(json.loads(raw))
        except json.JSONDecodeError as e:
            raise CredentialsInvalidError(
                f"Failed to parse auth profiles {self.file_path}: {e}"
            ) from e
        except ValidationError as e:
            raise CredentialsInvalidError(
                f"Invalid auth profiles format in {self.file_path}: {e}"
            ) from e

    def _write(self, data: AuthProfileData) -> None:
        payload = data.model_dump(by_alias=True, mode="json", exclude_none=True)
        temp_path: Path | None = None
        try:
            self.agent_dir.mkdir(parents=True, exist_ok=True)
            with tempfile.NamedTemporaryFile(
                mode="w",
                encoding="utf-8",
                dir=self.agent_dir,
                prefix=f".{AUTH_PROFILES_FILENAME}.",
                suffix=".tmp",
                delete=False,
            ) as f:
                temp_path = Path(f.name)
                json.dump(payload, f, indent=2)
            temp_path.chmod(0o600)
            os.replace(temp_path, self.file_path)
        except OSError as e:
            logger.error(
                "auth_profiles_write_failed",
                path=str(self.file_path),
                error=str(e),
                exc_info=e,
            )
            raise CredentialsStorageError(
                f"Error writing auth profiles {self.file_path}: {e}"
            ) from e
        finally:
            if temp_path is not None and temp_path.exists():
                with contextlib.suppress(OSError):
                    temp_path.unlink()

    def load(self) -> AuthProfileData:
        """Load all profiles.

        Raises:
            CredentialsStorageError: If the file cannot be read
            CredentialsInvalidError: If the file content is malformed
        """
        return self._read()

    async def upsert_profile(self, profile_id: str, credential: Any) -> None:
        """Insert or replace one profile; the most recent write wins."""
        validated = _credential_adapter.validate_python(credential)

        def upsert() -> None:
            data = self._read()
            data.profiles[profile_id] = validated
            self._write(data)

        await asyncio.to_thread(upsert)
        logger.info(
            "auth_profile_upserted",
            profile_id=profile_id,
            provider=validated.provider,
            mode=validated.type,
            category="auth",
        )

    async def list_profiles_for_provider(self, provider: str) -> list[str]:
        """Profile ids whose credential belongs to ``provider``."""
        wanted = normalize_provider_id(provider)
        data = await asyncio.to_thread(self._read)
        return [
            profile_id
            for profile_id, credential in data.profiles.items()
            if normalize_provider_id(credential.provider) == wanted
        ]
