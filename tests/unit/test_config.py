"""Unit tests for configuration loading."""

from pathlib import Path

import pytest

from kk.config import (
    DEFAULT_EDITOR,
    ConfigError,
    default_config_path,
    default_database_path,
    load_config,
    load_settings,
)

ENV_VARS = (
    "KK_CONFIG",
    "KK_DATABASE_PATH",
    "KK_EDITOR",
    "KK_LOG_DIR",
    "KK_LOG_LEVEL",
    "VISUAL",
    "EDITOR",
)


@pytest.fixture(autouse=True)
def clean_env(monkeypatch: pytest.MonkeyPatch, tmp_path: Path) -> Path:
    """Point the XDG directories at tmp_path and clear kk variables."""
    for name in ENV_VARS:
        monkeypatch.delenv(name, raising=False)
    monkeypatch.setenv("XDG_CONFIG_HOME", str(tmp_path / "config"))
    monkeypatch.setenv("XDG_DATA_HOME", str(tmp_path / "data"))
    monkeypatch.setenv("XDG_STATE_HOME", str(tmp_path / "state"))
    return tmp_path


def write_config(path: Path, content: str) -> Path:
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(content)
    return path


@pytest.mark.unit
class TestLoadConfig:
    """Tests for load_config."""

    def test_load_values(self, tmp_path: Path) -> None:
        path = write_config(
            tmp_path / "config.yaml",
            "editor: code --wait\ndatabase_path: ~/boards.db\nlog_level: debug\n",
        )

        assert load_config(path) == {
            "editor": "code --wait",
            "database_path": "~/boards.db",
            "log_level": "debug",
        }

    def test_empty_file(self, tmp_path: Path) -> None:
        assert load_config(write_config(tmp_path / "config.yaml", "")) == {}

    def test_null_values_are_skipped(self, tmp_path: Path) -> None:
        assert load_config(write_config(tmp_path / "config.yaml", "editor:\n")) == {}

    def test_missing_file(self, tmp_path: Path) -> None:
        with pytest.raises(ConfigError, match="not found"):
            load_config(tmp_path / "missing.yaml")

    def test_invalid_yaml(self, tmp_path: Path) -> None:
        path = write_config(tmp_path / "config.yaml", "editor: [unclosed\n")

        with pytest.raises(ConfigError, match="Invalid YAML"):
            load_config(path)

    def test_not_a_mapping(self, tmp_path: Path) -> None:
        path = write_config(tmp_path / "config.yaml", "- vim\n- nano\n")

        with pytest.raises(ConfigError, match="mapping"):
            load_config(path)

    def test_unknown_key(self, tmp_path: Path) -> None:
        path = write_config(tmp_path / "config.yaml", "editor: vim\ntheme: dark\n")

        with pytest.raises(ConfigError, match="theme"):
            load_config(path)

    def test_nested_value(self, tmp_path: Path) -> None:
        path = write_config(tmp_path / "config.yaml", "editor:\n  - vim\n")

        with pytest.raises(ConfigError, match="single value"):
            load_config(path)


@pytest.mark.unit
class TestLoadSettings:
    """Tests for load_settings precedence."""

    def test_defaults(self, clean_env: Path) -> None:
        settings = load_settings()

        assert settings.editor == DEFAULT_EDITOR
        assert settings.database_path == clean_env / "data" / "kk" / "kk.db"
        assert settings.log_dir == clean_env / "state" / "kk"
        assert settings.log_level == "INFO"
        assert settings.config_path is None

    def test_default_paths_follow_xdg(self, clean_env: Path) -> None:
        assert default_database_path() == clean_env / "data" / "kk" / "kk.db"
        assert default_config_path() == clean_env / "config" / "kk" / "config.yaml"

    def test_default_config_file_is_read(self, clean_env: Path) -> None:
        path = write_config(default_config_path(), "editor: nano\n")

        settings = load_settings()

        assert settings.editor == "nano"
        assert settings.config_path == path

    def test_editor_precedence(self, monkeypatch: pytest.MonkeyPatch) -> None:
        write_config(default_config_path(), "editor: from-file\n")
        assert load_settings().editor == "from-file"

        monkeypatch.setenv("EDITOR", "from-editor")
        assert load_settings().editor == "from-editor"

        monkeypatch.setenv("VISUAL", "from-visual")
        assert load_settings().editor == "from-visual"

        monkeypatch.setenv("KK_EDITOR", "from-kk")
        assert load_settings().editor == "from-kk"

        assert load_settings(editor="from-flag").editor == "from-flag"

    def test_empty_environment_value_is_ignored(self, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.setenv("VISUAL", "")
        monkeypatch.setenv("EDITOR", "nano")

        assert load_settings().editor == "nano"

    def test_database_path_precedence(
        self, monkeypatch: pytest.MonkeyPatch, tmp_path: Path
    ) -> None:
        monkeypatch.setenv("KK_DATABASE_PATH", str(tmp_path / "env.db"))
        assert load_settings().database_path == tmp_path / "env.db"
        assert load_settings(database_path=tmp_path / "flag.db").database_path == (
            tmp_path / "flag.db"
        )

    def test_home_is_expanded(self, monkeypatch: pytest.MonkeyPatch, tmp_path: Path) -> None:
        monkeypatch.setenv("HOME", str(tmp_path))
        path = write_config(tmp_path / "kk.yaml", "database_path: ~/boards.db\n")

        assert load_settings(config_path=path).database_path == tmp_path / "boards.db"

    def test_config_from_environment(self, monkeypatch: pytest.MonkeyPatch, tmp_path: Path):
        path = write_config(tmp_path / "elsewhere.yaml", "log_level: warning\n")
        monkeypatch.setenv("KK_CONFIG", str(path))

        settings = load_settings()

        assert settings.log_level == "WARNING"
        assert settings.config_path == path

    def test_explicit_missing_config_fails(self, tmp_path: Path) -> None:
        with pytest.raises(ConfigError):
            load_settings(config_path=tmp_path / "missing.yaml")

    def test_log_level_is_normalized(self) -> None:
        assert load_settings(log_level="debug").log_level == "DEBUG"

    def test_unknown_log_level(self, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.setenv("KK_LOG_LEVEL", "chatty")

        with pytest.raises(ConfigError, match="CHATTY"):
            load_settings()
