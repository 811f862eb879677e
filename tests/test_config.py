from __future__ import annotations

from pathlib import Path

import pytest
import yaml
from pydantic import ValidationError

from core.config import (
    DEFAULT_ENDPOINT,
    DEFAULT_MODEL,
    PLACEHOLDER_API_KEY,
    AppSettings,
    resolve_settings,
)
from core.errors import EXIT_BOOTSTRAP, ConfigFirstRunBootstrap, ConfigInvalid

from conftest import TEST_API_KEY


def test_first_run_writes_populated_defaults(config_dir: Path) -> None:
    with pytest.raises(ConfigFirstRunBootstrap) as excinfo:
        resolve_settings()

    path = config_dir / "config.yaml"
    assert excinfo.value.path == path
    assert excinfo.value.exit_code == EXIT_BOOTSTRAP
    assert path.exists()

    data = yaml.safe_load(path.read_text(encoding="utf-8"))
    for field in ("endpoint", "api_key", "model", "system_prompt", "timeout_seconds"):
        assert data[field], field
    assert data["endpoint"] == DEFAULT_ENDPOINT
    assert data["model"] == DEFAULT_MODEL
    assert data["api_key"] == PLACEHOLDER_API_KEY
    assert "verbatim" in data["system_prompt"]


def test_unedited_bootstrap_file_is_rejected_on_api_key(config_dir: Path) -> None:
    with pytest.raises(ConfigFirstRunBootstrap):
        resolve_settings()

    with pytest.raises(ConfigInvalid) as excinfo:
        resolve_settings()
    assert excinfo.value.field == "api_key"


def test_existing_file_is_loaded(write_config) -> None:
    path = write_config(max_tokens=256, image_detail="low")

    settings = resolve_settings(path)

    assert settings.endpoint == "https://api.test/v1"
    assert settings.api_key.get_secret_value() == TEST_API_KEY
    assert settings.model == "vision-test"
    assert settings.system_prompt == "Transcribe visible text verbatim."
    assert settings.timeout_seconds == 5
    assert settings.max_tokens == 256
    assert settings.image_detail == "low"


def test_optional_fields_fall_back_to_defaults(write_config) -> None:
    path = write_config(timeout_seconds=None)

    settings = resolve_settings(path)

    assert settings.timeout_seconds == 60
    assert settings.max_tokens == 1024
    assert settings.image_detail == "high"


def test_settings_are_immutable(write_config) -> None:
    settings = resolve_settings(write_config())

    with pytest.raises(ValidationError):
        settings.model = "other"  # type: ignore[misc]


def test_api_key_is_not_exposed_in_repr(write_config) -> None:
    settings = resolve_settings(write_config())

    assert TEST_API_KEY not in repr(settings)
    assert TEST_API_KEY not in str(settings)


def test_environment_overrides_file(write_config, monkeypatch: pytest.MonkeyPatch) -> None:
    path = write_config()
    monkeypatch.setenv("CLIPPY_MODEL", "env-model")
    monkeypatch.setenv("CLIPPY_API_KEY", "sk-from-env")

    settings = resolve_settings(path)

    assert settings.model == "env-model"
    assert settings.api_key.get_secret_value() == "sk-from-env"
    assert settings.endpoint == "https://api.test/v1"


def test_environment_overrides_are_validated(write_config, monkeypatch: pytest.MonkeyPatch) -> None:
    path = write_config()
    monkeypatch.setenv("CLIPPY_TIMEOUT_SECONDS", "soon")

    with pytest.raises(ConfigInvalid) as excinfo:
        resolve_settings(path)
    assert excinfo.value.field == "timeout_seconds"


def test_system_prompt_whitespace_is_preserved(write_config) -> None:
    prompt = "  Keep the leading indent.\n\nAnd the trailing newline.\n"
    path = write_config(system_prompt=prompt, endpoint="  https://api.test/v1/  ", model=" vision-test ")

    settings = resolve_settings(path)

    assert settings.system_prompt == prompt
    assert settings.endpoint == "https://api.test/v1"
    assert settings.model == "vision-test"


def test_api_key_surrounding_whitespace_is_trimmed(write_config) -> None:
    settings = resolve_settings(write_config(api_key=f"  {TEST_API_KEY}\n"))

    assert settings.api_key.get_secret_value() == TEST_API_KEY


def test_completions_url_is_accepted_as_endpoint(write_config) -> None:
    path = write_config(endpoint="https://api.test/v1/chat/completions/")

    assert resolve_settings(path).endpoint == "https://api.test/v1"


def test_explicit_missing_path_is_not_bootstrapped(tmp_path: Path) -> None:
    path = tmp_path / "nope" / "config.yaml"

    with pytest.raises(ConfigInvalid):
        resolve_settings(path)
    assert not path.exists()


def test_invalid_yaml_is_fatal(tmp_path: Path) -> None:
    path = tmp_path / "config.yaml"
    path.write_text("endpoint: [unclosed\n", encoding="utf-8")

    with pytest.raises(ConfigInvalid) as excinfo:
        resolve_settings(path)
    assert "YAML" in excinfo.value.reason


@pytest.mark.parametrize("content", ["", "- just\n- a list\n"])
def test_non_mapping_file_is_fatal(tmp_path: Path, content: str) -> None:
    path = tmp_path / "config.yaml"
    path.write_text(content, encoding="utf-8")

    with pytest.raises(ConfigInvalid):
        resolve_settings(path)


@pytest.mark.parametrize(
    ("values", "field"),
    [
        ({"endpoint": "  "}, "endpoint"),
        ({"model": ""}, "model"),
        ({"api_key": ""}, "api_key"),
        ({"timeout_seconds": -1}, "timeout_seconds"),
        ({"image_detail": "ultra"}, "image_detail"),
        ({"modle": "typo"}, "modle"),
    ],
)
def test_invalid_fields_are_named(write_config, values: dict, field: str) -> None:
    path = write_config(**values)

    with pytest.raises(ConfigInvalid) as excinfo:
        resolve_settings(path)
    assert excinfo.value.field == field
    assert field in str(excinfo.value)


def test_missing_required_model_uses_default(write_config) -> None:
    path = write_config(model=None)

    assert resolve_settings(path).model == DEFAULT_MODEL


def test_app_settings_rejects_placeholder_key_directly() -> None:
    with pytest.raises(ValidationError):
        AppSettings()
