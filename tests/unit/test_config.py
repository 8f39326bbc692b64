from pathlib import Path

import pytest

from cli_task_runner.config import deep_merge, load_config, load_yaml_config
from cli_task_runner.shared import FailurePolicy

_ENV_KEYS = (
    "TASK_RUNNER_FAILURE_POLICY",
    "TASK_RUNNER_LOG_LEVEL",
    "TASK_RUNNER_LOGS_DIR",
    "TASK_RUNNER_DEBUG",
    "TASK_RUNNER_TRACEBACKS",
)


@pytest.fixture(autouse=True)
def _isolated(monkeypatch, tmp_path) -> None:
    for key in _ENV_KEYS:
        monkeypatch.delenv(key, raising=False)
    monkeypatch.chdir(tmp_path)


def test_defaults() -> None:
    config = load_config()

    assert config["failure_policy"] is FailurePolicy.SOFT
    assert config["logging"] == {"level": "INFO", "logs_dir": None, "debug": False}
    assert config["console"]["show_tracebacks"] is False


def test_precedence_yaml_dotenv_env_overrides(tmp_path: Path, monkeypatch) -> None:
    yaml_file = tmp_path / "task-runner.yaml"
    yaml_file.write_text(
        "failure_policy: fast\nlogging:\n  level: DEBUG\n  logs_dir: from-yaml\n",
        encoding="utf-8",
    )
    (tmp_path / ".env").write_text("TASK_RUNNER_LOGS_DIR=from-dotenv\n", encoding="utf-8")
    monkeypatch.setenv("TASK_RUNNER_LOG_LEVEL", "WARNING")

    config = load_config(overrides={"console": {"show_tracebacks": "yes"}})

    assert config["failure_policy"] is FailurePolicy.FAST
    assert config["logging"]["level"] == "WARNING"
    assert config["logging"]["logs_dir"] == Path("from-dotenv")
    assert config["console"]["show_tracebacks"] is True


def test_invalid_failure_policy_is_rejected(monkeypatch) -> None:
    monkeypatch.setenv("TASK_RUNNER_FAILURE_POLICY", "sometimes")

    with pytest.raises(ValueError, match="failure_policy"):
        load_config()


def test_explicit_missing_yaml_raises(tmp_path: Path) -> None:
    with pytest.raises(ValueError, match="not found"):
        load_yaml_config(tmp_path / "nope.yaml")


def test_implicit_yaml_with_bad_shape_is_ignored(tmp_path: Path) -> None:
    (tmp_path / "task-runner.yaml").write_text("- a\n- b\n", encoding="utf-8")

    assert load_yaml_config() == {}


def test_deep_merge_keeps_sibling_keys() -> None:
    base = {"logging": {"level": "INFO", "debug": False}}
    deep_merge(base, {"logging": {"debug": True}})

    assert base == {"logging": {"level": "INFO", "debug": True}}


@pytest.mark.parametrize("body", ["logging:\n", "console: loud\n"])
def test_non_mapping_sections_are_rejected(tmp_path: Path, body: str) -> None:
    (tmp_path / "task-runner.yaml").write_text(body, encoding="utf-8")

    with pytest.raises(ValueError, match="expected a mapping"):
        load_config()
