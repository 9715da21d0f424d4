"""Tests for configuration loading."""

from pathlib import Path

import pytest

from obsidian_flashcard_sync.config import STATE_FILE_NAME, Config, load_config
from obsidian_flashcard_sync.exceptions import ConfigurationError


@pytest.fixture(autouse=True)
def _clean_env(monkeypatch, tmp_path):
    """Run from an empty directory with no config-related environment."""
    monkeypatch.chdir(tmp_path)
    for name in ("CONFIG", "VAULT_PATH", "VAULT_NAME", "STATE_PATH", "LOG_LEVEL", "NOTE_TYPE"):
        monkeypatch.delenv(f"FLASHCARD_SYNC_{name}", raising=False)


def test_defaults() -> None:
    config = load_config()

    assert config.vault_path == Path()
    assert config.note_type == "Basic"
    assert (config.front_field, config.back_field) == ("Front", "Back")
    assert config.anki_timeout == 30.0
    assert config.log_level == "INFO"


def test_state_path_defaults_to_own_file_in_vault(tmp_path) -> None:
    config = Config(vault_path=tmp_path)

    assert config.get_state_path() == tmp_path / ".obsidian-flashcard-sync.json"
    assert config.get_state_path().name == STATE_FILE_NAME
    assert ".obsidian/plugins" not in config.get_state_path().as_posix()


def test_explicit_state_path_wins(tmp_path) -> None:
    config = Config(vault_path=tmp_path, state_path=tmp_path / "elsewhere.json")

    assert config.get_state_path() == tmp_path / "elsewhere.json"


def test_vault_name_defaults_to_folder_name(tmp_path) -> None:
    vault = tmp_path / "My Vault"
    vault.mkdir()

    assert Config(vault_path=vault).get_vault_name() == "My Vault"
    assert Config(vault_path=vault, vault_name="Other").get_vault_name() == "Other"


def test_environment_variables(monkeypatch) -> None:
    monkeypatch.setenv("FLASHCARD_SYNC_NOTE_TYPE", "Basic (and reversed card)")
    monkeypatch.setenv("FLASHCARD_SYNC_LOG_LEVEL", "debug")

    config = load_config()

    assert config.note_type == "Basic (and reversed card)"
    assert config.log_level == "DEBUG"


def test_yaml_file_in_working_directory(tmp_path) -> None:
    (tmp_path / "config.yaml").write_text("note_type: Cloze\nanki_timeout: 5\n", encoding="utf-8")

    config = load_config()

    assert config.note_type == "Cloze"
    assert config.anki_timeout == 5.0


def test_config_env_var_points_at_file(monkeypatch, tmp_path) -> None:
    path = tmp_path / "elsewhere.yaml"
    path.write_text("front_field: Question\n", encoding="utf-8")
    monkeypatch.setenv("FLASHCARD_SYNC_CONFIG", str(path))

    assert load_config().front_field == "Question"


def test_overrides_beat_file_and_none_is_ignored(tmp_path) -> None:
    path = tmp_path / "config.yaml"
    path.write_text("note_type: Cloze\nback_field: Answer\n", encoding="utf-8")

    config = load_config(path, note_type="Basic", back_field=None)

    assert config.note_type == "Basic"
    assert config.back_field == "Answer"


def test_missing_explicit_file_raises(tmp_path) -> None:
    with pytest.raises(ConfigurationError, match="not found"):
        load_config(tmp_path / "nope.yaml")


def test_malformed_yaml_raises(tmp_path) -> None:
    path = tmp_path / "config.yaml"
    path.write_text("note_type: [unclosed\n", encoding="utf-8")

    with pytest.raises(ConfigurationError) as exc_info:
        load_config(path)
    assert exc_info.value.suggestion


def test_yaml_must_be_mapping(tmp_path) -> None:
    path = tmp_path / "config.yaml"
    path.write_text("- a\n- b\n", encoding="utf-8")

    with pytest.raises(ConfigurationError, match="mapping"):
        load_config(path)


@pytest.mark.parametrize(
    "overrides", [{"log_level": "LOUD"}, {"anki_timeout": 0}]
)
def test_invalid_values_raise_configuration_error(overrides) -> None:
    with pytest.raises(ConfigurationError, match="Invalid configuration"):
        load_config(**overrides)
