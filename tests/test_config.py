"""Tests for configuration loading and resolution."""

import logging
from pathlib import Path

import pytest

from preview_comment.config import (
    DEFAULT_TITLE,
    ConfigError,
    PreviewConfig,
    load_settings,
    log_config,
    required_env,
    resolve_config,
)
from preview_comment.models import Mode, TemplateKind, Transport
from preview_comment.template import TemplateParseError


class TestRequiredEnv:
    def test_comment_mode_without_file(self) -> None:
        assert required_env(Mode.COMMENT, None) == ("PR_NUMBER", "USER_LOGIN", "GITHUB_TOKEN", "URL", "COMMIT_SHA")

    def test_comment_mode_with_file(self, tmp_path: Path) -> None:
        assert required_env(Mode.COMMENT, tmp_path) == ("PR_NUMBER", "USER_LOGIN", "GITHUB_TOKEN")

    def test_delete_all(self) -> None:
        assert required_env(Mode.DELETE_ALL, None) == ("PR_NUMBER", "USER_LOGIN", "GITHUB_TOKEN")


class TestResolveConfig:
    def test_all_missing_reported_together(self) -> None:
        """Every missing variable is listed in one error."""
        with pytest.raises(ConfigError) as exc_info:
            resolve_config(load_settings(), repo="owner/repo", mode=Mode.COMMENT)
        assert exc_info.value.missing == ["PR_NUMBER", "USER_LOGIN", "GITHUB_TOKEN", "URL", "COMMIT_SHA"]
        for name in exc_info.value.missing:
            assert f"{name} environment variable is required" in str(exc_info.value)

    def test_partial_missing(self, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.setenv("PR_NUMBER", "1")
        monkeypatch.setenv("GITHUB_TOKEN", "t")
        monkeypatch.setenv("URL", "https://x")
        with pytest.raises(ConfigError) as exc_info:
            resolve_config(load_settings(), repo="owner/repo")
        assert exc_info.value.missing == ["USER_LOGIN", "COMMIT_SHA"]

    def test_empty_value_counts_as_missing(self, deploy_env: dict, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.setenv("COMMIT_SHA", "")
        with pytest.raises(ConfigError) as exc_info:
            resolve_config(load_settings(), repo="owner/repo")
        assert exc_info.value.missing == ["COMMIT_SHA"]

    def test_delete_all_does_not_need_template_vars(self, monkeypatch: pytest.MonkeyPatch) -> None:
        for name, value in {"PR_NUMBER": "1", "USER_LOGIN": "bot", "GITHUB_TOKEN": "t"}.items():
            monkeypatch.setenv(name, value)
        config = resolve_config(load_settings(), repo="owner/repo", mode=Mode.DELETE_ALL)
        assert config.mode is Mode.DELETE_ALL
        assert config.url == ""

    def test_static_file_does_not_need_template_vars(self, tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
        for name, value in {"PR_NUMBER": "1", "USER_LOGIN": "bot", "GITHUB_TOKEN": "t"}.items():
            monkeypatch.setenv(name, value)
        static = tmp_path / "body.md"
        static.write_text("hi", encoding="utf-8")
        config = resolve_config(load_settings(), repo="owner/repo", static_file=static)
        assert config.static_file == static

    def test_defaults(self, deploy_env: dict, caplog: pytest.LogCaptureFixture) -> None:
        """Mode defaults to comment with a notice; title and assets dir have defaults."""
        with caplog.at_level(logging.INFO):
            config = resolve_config(load_settings(), repo="owner/repo")
        assert "Defaulting to 'comment'" in caplog.text
        assert config.mode is Mode.COMMENT
        assert config.title == DEFAULT_TITLE
        assert config.assets_dir == ""
        assert config.debug is False
        assert config.pr_number == "42"
        assert config.token == "t"
        assert config.timeout == 30
        assert config.transport is Transport.HTTP
        assert config.template_kind is TemplateKind.MARKDOWN

    def test_empty_title_falls_back_to_default(self, deploy_env: dict, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.setenv("TITLE", "")
        assert resolve_config(load_settings(), repo="owner/repo").title == DEFAULT_TITLE

    @pytest.mark.parametrize(("value", "expected"), [("true", True), ("TRUE", True), ("1", False), ("yes", False)])
    def test_debug_only_true(self, deploy_env: dict, monkeypatch: pytest.MonkeyPatch, value: str, expected: bool) -> None:
        monkeypatch.setenv("DEBUG", value)
        assert resolve_config(load_settings(), repo="owner/repo").debug is expected

    def test_url_is_template(self, deploy_env: dict, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.setenv("URL", "https://pr{{PR_NUMBER}}.example.com")
        config = resolve_config(load_settings(), repo="owner/repo", url_is_template=True)
        assert config.url == "https://pr42.example.com"

    def test_url_not_template_kept_literal(self, deploy_env: dict, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.setenv("URL", "https://pr{{PR_NUMBER}}.example.com")
        config = resolve_config(load_settings(), repo="owner/repo")
        assert config.url == "https://pr{{PR_NUMBER}}.example.com"

    def test_bad_url_template(self, deploy_env: dict, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.setenv("URL", "https://pr{{PR_NUMBER.example.com")
        with pytest.raises(TemplateParseError):
            resolve_config(load_settings(), repo="owner/repo", url_is_template=True)

    def test_transport_argument_overrides_settings(self, deploy_env: dict, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.setenv("GITHUB_TRANSPORT", "http")
        config = resolve_config(load_settings(), repo="owner/repo", transport=Transport.GH)
        assert config.transport is Transport.GH
        assert config.template_kind is TemplateKind.JSON

    def test_config_is_frozen(self, deploy_env: dict) -> None:
        config = resolve_config(load_settings(), repo="owner/repo")
        with pytest.raises(Exception):
            config.repo = "other/repo"

    def test_token_not_in_repr(self, deploy_env: dict) -> None:
        config = resolve_config(load_settings(), repo="owner/repo")
        assert "token=" not in repr(config)


class TestLoadSettings:
    def test_yaml_values(self, tmp_path: Path) -> None:
        path = tmp_path / "config.yaml"
        path.write_text(
            "github:\n  api_url: https://ghe.example.com/api/v3\n  timeout: 10\n  transport: gh\n"
            "deployment:\n  title: '## Preview'\n"
            "logging:\n  level: DEBUG\n",
            encoding="utf-8",
        )
        settings = load_settings(path)
        assert settings.github.api_url == "https://ghe.example.com/api/v3"
        assert settings.github.timeout == 10
        assert settings.github.transport is Transport.GH
        assert settings.deployment.title == "## Preview"
        assert settings.logging.level == "DEBUG"

    def test_env_overrides_yaml(self, tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
        path = tmp_path / "config.yaml"
        path.write_text("deployment:\n  title: from-yaml\ngithub:\n  retries: 1\n", encoding="utf-8")
        monkeypatch.setenv("TITLE", "from-env")
        monkeypatch.setenv("GITHUB_RETRIES", "2")
        settings = load_settings(path)
        assert settings.deployment.title == "from-env"
        assert settings.github.retries == 2

    def test_env_substitution(self, tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.setenv("MY_ASSETS", "/srv/assets")
        path = tmp_path / "config.yaml"
        path.write_text("deployment:\n  assets_dir: ${MY_ASSETS}\n", encoding="utf-8")
        assert load_settings(path).deployment.assets_dir == "/srv/assets"

    def test_empty_yaml(self, tmp_path: Path) -> None:
        path = tmp_path / "config.yaml"
        path.write_text("", encoding="utf-8")
        assert load_settings(path).github.api_url == "https://api.github.com"

    def test_invalid_yaml(self, tmp_path: Path) -> None:
        path = tmp_path / "config.yaml"
        path.write_text("github: [unclosed", encoding="utf-8")
        with pytest.raises(ConfigError):
            load_settings(path)

    def test_invalid_value(self, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.setenv("GITHUB_TRANSPORT", "carrier-pigeon")
        with pytest.raises(ConfigError):
            load_settings()

    def test_api_url_from_env(self, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.setenv("GITHUB_API_URL", "https://ghe.example.com/api/v3")
        assert load_settings().github.api_url == "https://ghe.example.com/api/v3"


def test_log_config_hides_token(caplog: pytest.LogCaptureFixture) -> None:
    config = PreviewConfig(repo="o/r", pr_number="1", user_login="bot", token="super-secret")
    log = logging.getLogger("preview_comment.test")
    with caplog.at_level(logging.DEBUG, logger="preview_comment.test"):
        log_config(config, log)
    assert "super-secret" not in caplog.text
    assert "GitHub Token: set" in caplog.text
    assert "Repository: o/r" in caplog.text
