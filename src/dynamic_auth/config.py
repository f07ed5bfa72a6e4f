# Copyright 2024-2025 Amiable Development
# SPDX-License-Identifier: Apache-2.0

"""
Declarative scheme configuration.

This module provides:
- AuthConfig dataclass for builder settings and declared schemes
- load_config() to parse .auth/schemes.yaml
- apply_config() to register the declared schemes on a builder

Example .auth/schemes.yaml:

    authentication:
      validate_on_add: true
      case_sensitive_paths: false
      callback_path_prefix: /signin-
      schemes:
        - name: google
          handler: google
          display_name: Google
          options:
            claims_issuer: accounts.google.com
"""

import inspect
import logging
from dataclasses import dataclass, field, fields, is_dataclass
from pathlib import Path
from typing import Any, Dict, List, Mapping, Optional, Tuple

import yaml
from pydantic import BaseModel, Field, ValidationError, field_validator

from .errors import ConfigError
from .types import is_remote_options_type

logger = logging.getLogger(__name__)

CONFIG_RELATIVE_PATH = Path(".auth") / "schemes.yaml"
DEFAULT_CALLBACK_PATH_PREFIX = "/signin-"


class SchemeConfig(BaseModel):
    """A scheme declared in the configuration file."""

    name: str = Field(..., min_length=1, description="Unique scheme name")
    handler: str = Field(..., min_length=1, description="Key into the handler catalog")
    display_name: Optional[str] = Field(default=None, description="Human-readable name")
    callback_path: Optional[str] = Field(
        default=None, description="Callback path for remote schemes"
    )
    options: Dict[str, Any] = Field(
        default_factory=dict, description="Extra option attributes to set"
    )

    @field_validator("callback_path")
    @classmethod
    def validate_callback_path(cls, v: Optional[str]) -> Optional[str]:
        """Non-empty callback paths must be absolute."""
        if v and not v.startswith("/"):
            raise ValueError(f"callback_path must start with '/': {v!r}")
        return v


@dataclass
class AuthConfig:
    """Builder settings and declared schemes.

    Attributes:
        validate_on_add: Resolve remote schemes during registration
        case_sensitive_paths: Compare callback paths case-sensitively
        callback_path_prefix: Prefix for remote schemes declared without a path
        schemes: Declared schemes, registered in order
    """

    validate_on_add: bool = True
    case_sensitive_paths: bool = False
    callback_path_prefix: str = DEFAULT_CALLBACK_PATH_PREFIX
    schemes: List[SchemeConfig] = field(default_factory=list)


def load_config(project_root: Path) -> AuthConfig:
    """Load scheme configuration from .auth/schemes.yaml.

    A missing or unreadable file yields the defaults.

    Args:
        project_root: Path to the project root directory

    Returns:
        AuthConfig with settings from the config file or defaults

    Raises:
        ConfigError: If a declared scheme is invalid or names repeat.
    """
    config_path = Path(project_root) / CONFIG_RELATIVE_PATH

    if not config_path.exists():
        return AuthConfig()

    try:
        with open(config_path, "r") as f:
            data = yaml.safe_load(f) or {}
    except (yaml.YAMLError, IOError) as e:
        logger.warning(f"Ignoring unreadable scheme config {config_path}: {e}")
        return AuthConfig()

    if not isinstance(data, dict):
        return AuthConfig()

    section = data.get("authentication", {})
    if not isinstance(section, dict):
        return AuthConfig()

    prefix = section.get("callback_path_prefix", DEFAULT_CALLBACK_PATH_PREFIX)
    if not isinstance(prefix, str) or not prefix.startswith("/"):
        prefix = DEFAULT_CALLBACK_PATH_PREFIX

    raw_schemes = section.get("schemes", [])
    if not isinstance(raw_schemes, list):
        raise ConfigError(f"'schemes' must be a list in {config_path}")

    schemes: List[SchemeConfig] = []
    seen = set()
    for index, raw in enumerate(raw_schemes):
        if not isinstance(raw, dict):
            raise ConfigError(f"Scheme #{index} in {config_path} is not a mapping")
        try:
            scheme = SchemeConfig(**raw)
        except ValidationError as e:
            raise ConfigError(f"Invalid scheme #{index} in {config_path}: {e}") from e
        if scheme.name in seen:
            raise ConfigError(f"Scheme '{scheme.name}' declared twice in {config_path}")
        seen.add(scheme.name)
        schemes.append(scheme)

    return AuthConfig(
        validate_on_add=_flag(section, "validate_on_add", True),
        case_sensitive_paths=_flag(section, "case_sensitive_paths", False),
        callback_path_prefix=prefix,
        schemes=schemes,
    )


def apply_config(
    builder: Any,
    config: AuthConfig,
    handlers: Mapping[str, Tuple[type, type]],
) -> List[str]:
    """Register every declared scheme on a builder.

    Args:
        builder: A DynamicAuthenticationBuilder
        config: Loaded configuration
        handlers: Handler catalog mapping a handler key to
            (handler_type, options_type)

    Returns:
        Names of the registered schemes, in declaration order

    Raises:
        ConfigError: If a scheme names an unknown handler or option.
        CallbackPathConflictError: If two declared schemes share a path.
    """
    registered = []
    for scheme in config.schemes:
        if scheme.handler not in handlers:
            raise ConfigError(f"Scheme '{scheme.name}' uses unknown handler '{scheme.handler}'")
        handler_type, options_type = handlers[scheme.handler]

        values = dict(scheme.options)
        if is_remote_options_type(options_type):
            path = scheme.callback_path
            if path is None:
                path = f"{config.callback_path_prefix}{scheme.name}"
            values["callback_path"] = path

        known = _option_names(options_type)
        unknown = sorted(key for key in values if key not in known)
        if unknown:
            raise ConfigError(
                f"Scheme '{scheme.name}' sets unknown {options_type.__name__} options: {unknown}"
            )

        builder.add_scheme(
            scheme.name,
            handler_type,
            options_type,
            configure=_setter(values),
            display_name=scheme.display_name,
        )
        registered.append(scheme.name)

    logger.info(f"Registered {len(registered)} configured schemes")
    return registered


def _setter(values: Dict[str, Any]):
    def configure(options: Any) -> None:
        for key, value in values.items():
            setattr(options, key, value)

    return configure


def _flag(section: Dict[str, Any], key: str, default: bool) -> bool:
    # Quoted YAML values such as "false" are strings, not booleans
    value = section.get(key, default)
    if not isinstance(value, bool):
        logger.warning(f"Ignoring non-boolean '{key}': {value!r}, using {default}")
        return default
    return value


def _option_names(options_type: type) -> set:
    """Attribute names an options class accepts, without instantiating it."""
    names = {name for name in dir(options_type) if not name.startswith("_")}
    for klass in options_type.__mro__:
        names.update(inspect.get_annotations(klass))
    if is_dataclass(options_type):
        names.update(f.name for f in fields(options_type))
    return names
