import pytest

from weekly_tasks.config import ConfigError, load_config

SETTINGS = [
    "WEEKLY_TASKS_PATH",
    "WEEKLY_TASKS_GIT_CHECKPOINTS",
    "WEEKLY_TASKS_SERVICE_TOKEN",
    "WEEKLY_TASKS_LOG_LEVEL",
    "WEEKLY_TASKS_HOST",
    "WEEKLY_TASKS_PORT",
]


@pytest.fixture(autouse=True)
def _clear_settings(monkeypatch):
    for key in SETTINGS:
        monkeypatch.delenv(key, raising=False)


def test_load_config_requires_path(monkeypatch, tmp_path):
    monkeypatch.chdir(tmp_path)

    with pytest.raises(ConfigError) as excinfo:
        load_config()

    assert "WEEKLY_TASKS_PATH" in str(excinfo.value)


def test_load_config_reads_env(monkeypatch, tmp_path):
    monkeypatch.chdir(tmp_path)
    monkeypatch.setenv("WEEKLY_TASKS_PATH", str(tmp_path))

    config = load_config()

    assert config.workspace_path == tmp_path.resolve()
    assert config.git_checkpoints is True
    assert config.service_token is None
    assert config.log_level == "INFO"
    assert (config.host, config.port) == ("127.0.0.1", 18180)


def test_load_config_reads_dotenv(monkeypatch, tmp_path):
    monkeypatch.chdir(tmp_path)
    tasks_root = tmp_path / "tasks"
    tasks_root.mkdir()
    (tmp_path / ".env").write_text(
        "\n".join(
            [
                "# local settings",
                f'WEEKLY_TASKS_PATH="{tasks_root}"',
                "export WEEKLY_TASKS_SERVICE_TOKEN='secret'",
                "WEEKLY_TASKS_GIT_CHECKPOINTS=off",
            ]
        ),
        encoding="utf-8",
    )

    config = load_config()

    assert config.workspace_path == tasks_root.resolve()
    assert config.service_token == "secret"
    assert config.git_checkpoints is False


def test_load_config_reads_dotenv_relative_path(monkeypatch, tmp_path):
    service_root = tmp_path / "service"
    service_root.mkdir()
    (service_root / ".env").write_text(
        'WEEKLY_TASKS_PATH="./tasks"\n', encoding="utf-8"
    )
    monkeypatch.chdir(service_root)

    config = load_config()

    assert config.workspace_path == (service_root / "tasks").resolve()


def test_load_config_prefers_env_over_dotenv(monkeypatch, tmp_path):
    env_root = tmp_path / "env"
    dotenv_root = tmp_path / "dotenv"
    (tmp_path / ".env").write_text(
        f"WEEKLY_TASKS_PATH={dotenv_root}\n", encoding="utf-8"
    )
    monkeypatch.setenv("WEEKLY_TASKS_PATH", str(env_root))
    monkeypatch.chdir(tmp_path)

    config = load_config()

    assert config.workspace_path == env_root.resolve()


def test_load_config_reads_server_settings(monkeypatch, tmp_path):
    monkeypatch.chdir(tmp_path)
    monkeypatch.setenv("WEEKLY_TASKS_PATH", str(tmp_path))
    monkeypatch.setenv("WEEKLY_TASKS_HOST", "0.0.0.0")
    monkeypatch.setenv("WEEKLY_TASKS_PORT", "9000")
    monkeypatch.setenv("WEEKLY_TASKS_LOG_LEVEL", "debug")

    config = load_config()

    assert (config.host, config.port) == ("0.0.0.0", 9000)
    assert config.log_level == "DEBUG"


@pytest.mark.parametrize(
    "key, value",
    [
        ("WEEKLY_TASKS_GIT_CHECKPOINTS", "maybe"),
        ("WEEKLY_TASKS_PORT", "http"),
        ("WEEKLY_TASKS_PORT", "70000"),
        ("WEEKLY_TASKS_LOG_LEVEL", "LOUD"),
    ],
)
def test_load_config_rejects_invalid_values(monkeypatch, tmp_path, key, value):
    monkeypatch.chdir(tmp_path)
    monkeypatch.setenv("WEEKLY_TASKS_PATH", str(tmp_path))
    monkeypatch.setenv(key, value)

    with pytest.raises(ConfigError) as excinfo:
        load_config()

    assert key in str(excinfo.value)
