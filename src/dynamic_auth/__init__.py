"""Dynamic Auth - runtime registration of authentication schemes.

Registers scheme handlers at runtime, resolves each scheme's options once
per name under concurrent access, and guarantees that remote schemes never
share a callback path.

Usage:
    from dynamic_auth import DynamicAuthenticationBuilder, RemoteSchemeOptions

    builder = DynamicAuthenticationBuilder()
    builder.add_remote_scheme(
        "github",
        "GitHub",
        lambda o: setattr(o, "callback_path", "/signin-github"),
        handler_type=GitHubHandler,
    )
"""

from .builder import DynamicAuthenticationBuilder
from .config import AuthConfig, SchemeConfig, apply_config, load_config
from .errors import (
    CallbackPathConflictError,
    ConfigError,
    ConflictError,
    DuplicateSchemeError,
    DynamicAuthError,
    ProviderQueryError,
    RecursiveResolutionError,
    SchemeNotFoundError,
)
from .hooks import PostConfigureHooks
from .options_cache import OptionsCacheWrapper
from .provider import InMemorySchemeProvider, SchemeProvider
from .registry import HandlerTypeRegistry
from .types import AuthenticationSchemeOptions, RemoteSchemeOptions, SchemeDefinition
from .validation import CallbackPathValidator, SchemeContext

__version__ = "0.1.0"

__all__ = [
    "__version__",
    "AuthConfig",
    "AuthenticationSchemeOptions",
    "CallbackPathConflictError",
    "CallbackPathValidator",
    "ConfigError",
    "ConflictError",
    "DuplicateSchemeError",
    "DynamicAuthError",
    "DynamicAuthenticationBuilder",
    "HandlerTypeRegistry",
    "InMemorySchemeProvider",
    "OptionsCacheWrapper",
    "PostConfigureHooks",
    "ProviderQueryError",
    "RecursiveResolutionError",
    "RemoteSchemeOptions",
    "SchemeConfig",
    "SchemeContext",
    "SchemeDefinition",
    "SchemeNotFoundError",
    "SchemeProvider",
    "apply_config",
    "load_config",
]
