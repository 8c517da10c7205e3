"""JSON file storage for the gateway configuration document."""

import asyncio
import contextlib
import json
import os
import tempfile
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any

from provider_connect.core.logging import get_logger

from .validation import ConfigIssue, validate_config_schema


logger = get_logger(__name__)


class ConfigIOError(Exception):
    """Raised when the configuration file cannot be read or written."""

    pass


@dataclass
class ConfigSnapshot:
    """Point-in-time view of the configuration file."""

    path: Path
    exists: bool
    valid: bool
    config: dict[str, Any] = field(default_factory=dict)
    issues: list[ConfigIssue] = field(default_factory=list)


class ConfigFileStore:
    """Reads and atomically writes the gateway configuration file."""

    def __init__(self, file_path: Path):
        """Initialize config file storage.

        Args:
            file_path: Path to the JSON configuration file
        """
        self.file_path = file_path

    def _read_raw(self) -> str | None:
        try:
            return self.file_path.read_text(encoding="utf-8")
        except FileNotFoundError:
            return None

    def _load_document(self) -> dict[str, Any]:
        try:
            raw = self._read_raw()
        except OSError as e:
            logger.error(
                "config_read_failed", path=str(self.file_path), error=str(e), exc_info=e
            )
            raise ConfigIOError(f"Error reading config file {self.file_path}: {e}") from e

        if raw is None:
            logger.debug("config_file_not_found", path=str(self.file_path))
            return {}

        try:
            data = json.loads(raw) if raw.strip() else {}
        except json.JSONDecodeError as e:
            raise ConfigIOError(
                f"Failed to parse config file {self.file_path}: {e}"
            ) from e

        if not isinstance(data, dict):
            raise ConfigIOError(f"Config file {self.file_path} must contain an object")
        return data

    async def load(self) -> dict[str, Any]:
        """Load the configuration document.

        A missing file yields an empty document.

        Raises:
            ConfigIOError: If the file cannot be read or is not a JSON object
        """
        return await asyncio.to_thread(self._load_document)

    async def read_snapshot(self) -> ConfigSnapshot:
        """Read the file and check it against the schema.

        Never raises for content problems: unreadable or malformed files come
        back as an invalid snapshot.
        """

        def read() -> ConfigSnapshot:
            exists = self.file_path.is_file()
            try:
                document = self._load_document()
            except ConfigIOError as e:
                return ConfigSnapshot(
                    path=self.file_path,
                    exists=exists,
                    valid=False,
                    issues=[ConfigIssue(path="", message=str(e))],
                )
            result = validate_config_schema(document)
            return ConfigSnapshot(
                path=self.file_path,
                exists=exists,
                valid=result.ok,
                config=document,
                issues=result.issues,
            )

        return await asyncio.to_thread(read)

    async def write(self, config: dict[str, Any]) -> None:
        """Write the configuration document.

        Each write goes to its own temp file in the target directory and is
        renamed into place, so readers never see a partial file and concurrent
        writers never share a temp file. The last rename wins.

        Raises:
            ConfigIOError: If the file cannot be written
        """

        def write_file() -> None:
            self.file_path.parent.mkdir(parents=True, exist_ok=True)
            temp_path: Path | None = None
            try:
                with tempfile.NamedTemporaryFile(
                    mode="w",
                    encoding="utf-8",
                    dir=self.file_path.parent,
                    prefix=f".{self.file_path.name}.",
                    suffix=".tmp",
                    delete=False,
                ) as f:
                    temp_path = Path(f.name)
                    json.dump(config, f, indent=2)
                    f.write("\n")
                temp_path.chmod(0o600)
                os.replace(temp_path, self.file_path)
            finally:
                if temp_path is not None and temp_path.exists():
                    with contextlib.suppress(OSError):
                        temp_path.unlink()

        try:
            await asyncio.to_thread(write_file)
        except (OSError, TypeError, ValueError) as e:
            logger.error(
                "config_write_failed",
                path=str(self.file_path),
                error=str(e),
                exc_info=e,
            )
            raise ConfigIOError(f"Error writing config file {self.file_path}: {e}") from e

        logger.info("config_write_completed", path=str(self.file_path), category="config")
