"""Shared fixtures."""

import pytest

ENV_VARS = (
    "PR_NUMBER",
    "USER_LOGIN",
    "GITHUB_TOKEN",
    "URL",
    "COMMIT_SHA",
    "TITLE",
    "ASSETS_DIR",
    "DEBUG",
    "GITHUB_API_URL",
    "GITHUB_TIMEOUT",
    "GITHUB_RETRIES",
    "GITHUB_TRANSPORT",
    "LOGGING_LEVEL",
    "LOGGING_FORMAT",
)


@pytest.fixture(autouse=True)
def clean_env(monkeypatch: pytest.MonkeyPatch) -> None:
    """Tests start without any CI variables set (CI runners set GITHUB_TOKEN)."""
    for name in ENV_VARS:
        monkeypatch.delenv(name, raising=False)


@pytest.fixture
def deploy_env(monkeypatch: pytest.MonkeyPatch) -> dict[str, str]:
    """Complete environment for comment mode."""
    env = {
        "PR_NUMBER": "42",
        "USER_LOGIN": "bot",
        "GITHUB_TOKEN": "t",
        "URL": "https://x",
        "COMMIT_SHA": "abc123",
    }
    for name, value in env.items():
        monkeypatch.setenv(name, value)
    return env
