# Copyright 2024-2025 Amiable Development
# SPDX-License-Identifier: Apache-2.0

"""Tests for declarative scheme configuration."""

from dataclasses import dataclass
from pathlib import Path
from typing import Optional

import pytest

from dynamic_auth.builder import DynamicAuthenticationBuilder
from dynamic_auth.config import AuthConfig, SchemeConfig, apply_config, load_config
from dynamic_auth.errors import CallbackPathConflictError, ConfigError
from dynamic_auth.types import AuthenticationSchemeOptions, RemoteSchemeOptions


class OAuthHandler:
    pass


class CookieHandler:
    pass


@dataclass
class OAuthOptions(RemoteSchemeOptions):
    client_id: Optional[str] = None


HANDLERS = {
    "oauth": (OAuthHandler, OAuthOptions),
    "cookies": (CookieHandler, AuthenticationSchemeOptions),
}


def write_config(root: Path, text: str) -> None:
    config_dir = root / ".auth"
    config_dir.mkdir()
    (config_dir / "schemes.yaml").write_text(text)


class TestLoadConfig:
    """Test .auth/schemes.yaml parsing."""

    def test_missing_file_returns_defaults(self, tmp_path):
        config = load_config(tmp_path)

        assert config == AuthConfig()
        assert config.validate_on_add is True
        assert config.callback_path_prefix == "/signin-"

    def test_invalid_yaml_returns_defaults(self, tmp_path):
        write_config(tmp_path, "authentication: [unclosed")

        assert load_config(tmp_path) == AuthConfig()

    def test_full_config(self, tmp_path):
        write_config(
            tmp_path,
            """
authentication:
  validate_on_add: false
  case_sensitive_paths: true
  callback_path_prefix: /auth/
  schemes:
    - name: github
      handler: oauth
      display_name: GitHub
      callback_path: /signin-github
      options:
        client_id: abc
    - name: cookies
      handler: cookies
""",
        )

        config = load_config(tmp_path)

        assert config.validate_on_add is False
        assert config.case_sensitive_paths is True
        assert config.callback_path_prefix == "/auth/"
        assert [s.name for s in config.schemes] == ["github", "cookies"]
        assert config.schemes[0].options == {"client_id": "abc"}
        assert config.schemes[1].callback_path is None

    def test_relative_callback_path_rejected(self, tmp_path):
        write_config(
            tmp_path,
            """
authentication:
  schemes:
    - name: github
      handler: oauth
      callback_path: signin-github
""",
        )

        with pytest.raises(ConfigError, match="github|#0"):
            load_config(tmp_path)

    def test_missing_handler_rejected(self, tmp_path):
        write_config(tmp_path, "authentication:\n  schemes:\n    - name: github\n")

        with pytest.raises(ConfigError):
            load_config(tmp_path)

    def test_duplicate_names_rejected(self, tmp_path):
        write_config(
            tmp_path,
            """
authentication:
  schemes:
    - {name: github, handler: oauth}
    - {name: github, handler: oauth}
""",
        )

        with pytest.raises(ConfigError, match="declared twice"):
            load_config(tmp_path)

    def test_invalid_prefix_falls_back(self, tmp_path):
        write_config(tmp_path, "authentication:\n  callback_path_prefix: signin\n")

        assert load_config(tmp_path).callback_path_prefix == "/signin-"


class TestApplyConfig:
    """Test registering declared schemes."""

    def test_registers_declared_schemes(self):
        config = AuthConfig(
            schemes=[
                SchemeConfig(name="github", handler="oauth", display_name="GitHub", options={"client_id": "abc"}),
                SchemeConfig(name="cookies", handler="cookies"),
            ]
        )
        builder = DynamicAuthenticationBuilder.from_config(config)

        registered = apply_config(builder, config, HANDLERS)

        assert registered == ["github", "cookies"]
        github = builder.get_options("github")
        assert github.client_id == "abc"
        assert github.callback_path == "/signin-github"
        assert builder.handler_types == (OAuthHandler, CookieHandler)

    def test_explicit_callback_path_wins(self):
        config = AuthConfig(schemes=[SchemeConfig(name="github", handler="oauth", callback_path="/gh")])
        builder = DynamicAuthenticationBuilder.from_config(config)

        apply_config(builder, config, HANDLERS)

        assert builder.get_options("github").callback_path == "/gh"

    def test_conflicting_declarations(self):
        config = AuthConfig(
            schemes=[
                SchemeConfig(name="a", handler="oauth", callback_path="/cb"),
                SchemeConfig(name="b", handler="oauth", callback_path="/cb"),
            ]
        )
        builder = DynamicAuthenticationBuilder.from_config(config)

        with pytest.raises(CallbackPathConflictError):
            apply_config(builder, config, HANDLERS)

    def test_unknown_handler(self):
        config = AuthConfig(schemes=[SchemeConfig(name="x", handler="saml")])

        with pytest.raises(ConfigError, match="unknown handler"):
            apply_config(DynamicAuthenticationBuilder(), config, HANDLERS)

    def test_unknown_option(self):
        config = AuthConfig(schemes=[SchemeConfig(name="x", handler="oauth", options={"secret_sauce": 1})])

        with pytest.raises(ConfigError, match="secret_sauce"):
            apply_config(DynamicAuthenticationBuilder(), config, HANDLERS)

    def test_from_config_flags(self):
        builder = DynamicAuthenticationBuilder.from_config(
            AuthConfig(validate_on_add=False, case_sensitive_paths=True)
        )

        assert builder.validate_on_add is False


class TestConfigTypeChecks:
    """Test that malformed values fall back or fail cleanly."""

    def test_quoted_booleans_fall_back_to_defaults(self, tmp_path):
        write_config(
            tmp_path,
            """
authentication:
  validate_on_add: "false"
  case_sensitive_paths: "true"
""",
        )

        config = load_config(tmp_path)

        assert config.validate_on_add is True
        assert config.case_sensitive_paths is False

    def test_options_class_with_required_arguments(self):
        @dataclass
        class TenantOptions(RemoteSchemeOptions):
            tenant: str = ""

            def __init__(self, tenant: str):
                super().__init__()
                self.tenant = tenant

        handlers = {"tenant": (OAuthHandler, TenantOptions)}

        unknown = AuthConfig(schemes=[SchemeConfig(name="t", handler="tenant", options={"region": "eu"})])
        with pytest.raises(ConfigError, match="region"):
            apply_config(DynamicAuthenticationBuilder(validate_on_add=False), unknown, handlers)

        known = AuthConfig(schemes=[SchemeConfig(name="t", handler="tenant", options={"tenant": "acme"})])
        assert apply_config(DynamicAuthenticationBuilder(validate_on_add=False), known, handlers) == ["t"]
