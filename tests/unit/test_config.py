from __future__ import annotations

import pytest
from pydantic import ValidationError
from pydantic_settings import SettingsError

from codesee_action.config import RunConfig
from codesee_action.errors import MissingRequiredConfig


def test_config_loads_defaults_and_masks(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("INPUT_API_TOKEN", "cs_test_dummy")
    cfg = RunConfig()

    assert cfg.step == "legacy"
    assert cfg.support_typescript is False
    assert cfg.skip_upload is False
    assert cfg.languages == {}
    assert cfg.webpack_config_path is None
    assert "cs_test_dummy" not in repr(cfg)
    assert cfg.require_api_token() == "cs_test_dummy"


def test_config_parses_booleans_and_languages(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("INPUT_SUPPORT_TYPESCRIPT", "true")
    monkeypatch.setenv("INPUT_SKIP_UPLOAD", "TRUE")
    monkeypatch.setenv("INPUT_LANGUAGES", '{"Python": true, "java": false}')
    monkeypatch.setenv("INPUT_STEP", " map ")
    cfg = RunConfig()

    assert cfg.support_typescript is True
    assert cfg.skip_upload is True
    assert cfg.step == "map"
    assert cfg.language_enabled("python") is True
    assert cfg.language_enabled("java") is False
    assert cfg.language_enabled("go") is False


def test_invalid_boolean_raises(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("INPUT_SKIP_UPLOAD", "maybe")

    with pytest.raises(ValidationError):
        RunConfig()


def test_invalid_languages_json_raises(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("INPUT_LANGUAGES", "{python: yes")

    with pytest.raises((SettingsError, ValidationError)):
        RunConfig()


@pytest.mark.parametrize("raw", ["__NULL__", " __NULL__ ", "   "])
def test_null_sentinel_means_no_webpack_config(monkeypatch: pytest.MonkeyPatch, raw: str) -> None:
    monkeypatch.setenv("INPUT_WEBPACK_CONFIG_PATH", raw)
    assert RunConfig().webpack_config_path is None


def test_webpack_config_path_kept(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("INPUT_WEBPACK_CONFIG_PATH", "config/webpack.js")
    assert RunConfig().webpack_config_path == "config/webpack.js"


def test_runner_head_ref_wins_over_input(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("INPUT_GITHUB_REF", "stale-branch")
    monkeypatch.setenv("GITHUB_HEAD_REF", "feature/map")
    assert RunConfig().head_ref == "feature/map"


def test_input_head_ref_used_without_runner_value(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("INPUT_GITHUB_REF", "release")
    monkeypatch.setenv("GITHUB_HEAD_REF", "")
    assert RunConfig().head_ref == "release"


def test_runner_values(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("GITHUB_REPOSITORY", "org/repo")
    monkeypatch.setenv("GITHUB_BASE_REF", "main")
    cfg = RunConfig()
    assert cfg.origin == "org/repo"
    assert cfg.base_ref == "main"
    assert cfg.head_ref is None


def test_missing_token_is_checked_lazily() -> None:
    cfg = RunConfig(step="map")

    assert cfg.has_credential() is False
    with pytest.raises(MissingRequiredConfig):
        cfg.require_api_token()


def test_config_is_frozen() -> None:
    cfg = RunConfig()

    with pytest.raises((TypeError, ValidationError)):
        cfg.step = "map"


def test_runner_values_are_not_read_from_input_names(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("INPUT_HEAD_REF", "sneaky")
    monkeypatch.setenv("INPUT_BASE_REF", "sneaky")
    monkeypatch.setenv("INPUT_ORIGIN", "sneaky/repo")
    cfg = RunConfig()

    assert cfg.head_ref is None
    assert cfg.base_ref is None
    assert cfg.origin is None


def test_runner_values_accepted_by_alias() -> None:
    cfg = RunConfig(GITHUB_REPOSITORY="org/repo", GITHUB_BASE_REF="main", GITHUB_HEAD_REF="feature/map")

    assert (cfg.origin, cfg.base_ref, cfg.head_ref) == ("org/repo", "main", "feature/map")
