"""Tests for process settings loading."""

from pathlib import Path

import pytest

from provider_connect.config.core import OAuthSettings, PathSettings
from provider_connect.config.settings import ConfigurationError, Settings


@pytest.fixture(autouse=True)
def isolated_config(tmp_path, monkeypatch):
    """Keep settings discovery away from the developer's files."""
    monkeypatch.chdir(tmp_path)
    monkeypatch.setenv("XDG_CONFIG_HOME", str(tmp_path / "xdg"))
    for name in ("PROVIDER_CONNECT_CONFIG_FILE", "PROVIDER_CONNECT_SERVER__PORT"):
        monkeypatch.delenv(name, raising=False)


@pytest.mark.unit
class TestSettings:
    """Test defaults, environment and TOML precedence."""

    def test_defaults(self):
        """Test built-in defaults."""
        settings = Settings()

        assert settings.server.port == 18789
        assert settings.oauth.state_ttl_seconds == 600
        assert settings.oauth.callback_path == "/auth/callback"
        assert settings.server_url == "http://127.0.0.1:18789"

    def test_environment_override(self, monkeypatch):
        """Test nested settings come from prefixed environment variables."""
        monkeypatch.setenv("PROVIDER_CONNECT_SERVER__PORT", "9000")
        assert Settings().server.port == 9000

    def test_toml_file(self, tmp_path):
        """Test values are read from an explicit TOML file."""
        path = tmp_path / "settings.toml"
        path.write_text('[server]\nport = 8100\n\n[oauth]\ncallback_path = "/cb"\n')

        settings = Settings.from_config(config_path=path)

        assert settings.server.port == 8100
        assert settings.oauth.callback_path == "/cb"

    def test_toml_discovered_in_cwd(self, tmp_path):
        """Test .provider-connect.toml in the working directory is used."""
        (tmp_path / ".provider-connect.toml").write_text("[server]\nport = 8200\n")
        assert Settings.from_config().server.port == 8200

    def test_environment_beats_toml(self, tmp_path, monkeypatch):
        """Test environment variables win over the TOML file."""
        path = tmp_path / "settings.toml"
        path.write_text("[server]\nport = 8100\n")
        monkeypatch.setenv("PROVIDER_CONNECT_SERVER__PORT", "9100")

        assert Settings.from_config(config_path=path).server.port == 9100

    def test_keyword_overrides(self):
        """Test keyword overrides apply last."""
        settings = Settings.from_config(server={"host": "0.0.0.0"})
        assert settings.server.host == "0.0.0.0"

    def test_invalid_toml(self, tmp_path):
        """Test a malformed TOML file raises ConfigurationError."""
        path = tmp_path / "bad.toml"
        path.write_text("[server\n")

        with pytest.raises(ConfigurationError, match="Invalid TOML"):
            Settings.from_config(config_path=path)

    def test_callback_path_must_be_absolute(self):
        """Test the callback path needs a leading slash."""
        with pytest.raises(ValueError):
            OAuthSettings(callback_path="auth/callback")

    def test_config_file_defaults_to_state_dir(self):
        """Test the gateway config file lives in the state directory by default."""
        paths = PathSettings(state_dir=Path("/srv/state"))
        assert paths.resolved_config_file == Path("/srv/state/gateway.json")

    def test_toml_paths_are_converted(self, tmp_path):
        """Test TOML path entries become Path objects usable by the container."""
        state_dir = tmp_path / "gateway-state"
        path = tmp_path / "settings.toml"
        path.write_text(f'[paths]\nstate_dir = "{state_dir.as_posix()}"\n')

        settings = Settings.from_config(config_path=path)

        assert isinstance(settings.paths.state_dir, Path)
        assert settings.paths.resolved_config_file == state_dir / "gateway.json"

    def test_toml_callback_path_is_validated(self, tmp_path):
        """Test a TOML callback path without a leading slash is rejected."""
        path = tmp_path / "settings.toml"
        path.write_text('[oauth]\ncallback_path = "auth/callback"\n')

        with pytest.raises(ConfigurationError, match="callback_path"):
            Settings.from_config(config_path=path)

    def test_keyword_path_override_is_converted(self, tmp_path):
        """Test keyword path overrides go through validation too."""
        settings = Settings.from_config(
            paths={"config_file": str(tmp_path / "custom.json")}
        )
        assert settings.paths.resolved_config_file == tmp_path / "custom.json"
