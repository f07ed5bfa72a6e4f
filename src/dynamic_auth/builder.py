# Copyright 2024-2025 Amiable Development
# SPDX-License-Identifier: Apache-2.0

"""
Dynamic authentication builder.

Entry point for registering authentication schemes at runtime. Each options
type gets one OptionsCacheWrapper; remote options types additionally get the
callback path validator installed once as a post-configuration hook.

Usage:
    builder = DynamicAuthenticationBuilder()
    builder.add_remote_scheme(
        "google",
        "Google",
        lambda o: setattr(o, "callback_path", "/signin-google"),
        handler_type=GoogleHandler,
        options_type=GoogleOptions,
    )
    options = builder.get_options("google")
"""

import logging
import threading
from typing import TYPE_CHECKING, Any, Optional

from .errors import SchemeNotFoundError
from .hooks import PostConfigureHooks
from .options_cache import OptionsCacheWrapper
from .provider import InMemorySchemeProvider
from .registry import HandlerTypeRegistry
from .types import ConfigureOptions, RemoteSchemeOptions, SchemeDefinition, is_remote_options_type
from .validation import CallbackPathValidator, SchemeContext

if TYPE_CHECKING:
    from .config import AuthConfig

logger = logging.getLogger(__name__)


class DynamicAuthenticationBuilder:
    """Registers schemes at runtime and resolves their options once.

    Attributes:
        provider: Scheme provider holding every registered definition.
        definition_type: Type of the scheme definitions this builder stores.
        validate_on_add: Resolve remote schemes' options during registration,
            so a callback path conflict fails the registration itself.
        hooks: Post-configuration hooks shared by every options cache.
    """

    def __init__(
        self,
        provider: Optional[InMemorySchemeProvider] = None,
        definition_type: type = SchemeDefinition,
        validate_on_add: bool = True,
        case_sensitive_paths: bool = False,
    ) -> None:
        self.provider = provider if provider is not None else InMemorySchemeProvider()
        self.definition_type = definition_type
        self.validate_on_add = validate_on_add
        self.hooks = PostConfigureHooks()

        self._handler_types = HandlerTypeRegistry()
        self._caches: dict[type, OptionsCacheWrapper] = {}
        self._configures: dict[str, Optional[ConfigureOptions]] = {}
        self._lock = threading.RLock()
        # Held while a registration or update validates its options
        self._registration_lock = threading.RLock()
        self._validator = CallbackPathValidator(
            SchemeContext(provider=self.provider, lookup=self.try_get_options),
            case_sensitive=case_sensitive_paths,
        )

    @classmethod
    def from_config(
        cls,
        config: "AuthConfig",
        provider: Optional[InMemorySchemeProvider] = None,
    ) -> "DynamicAuthenticationBuilder":
        """Create a builder honouring the flags of a loaded AuthConfig."""
        return cls(
            provider=provider,
            validate_on_add=config.validate_on_add,
            case_sensitive_paths=config.case_sensitive_paths,
        )

    @property
    def handler_types(self) -> tuple[type, ...]:
        """Handler types of every successfully added scheme."""
        return self._handler_types.list_handler_types()

    @property
    def schemes(self) -> list[SchemeDefinition]:
        return self.provider.get_all_schemes()

    def add_scheme(
        self,
        name: str,
        handler_type: type,
        options_type: type,
        configure: Optional[ConfigureOptions] = None,
        display_name: Optional[str] = None,
    ) -> "DynamicAuthenticationBuilder":
        """Register a scheme.

        Remote options types get the callback path validator installed. With
        validate_on_add, a remote scheme's options are resolved immediately;
        a failed resolution rolls the registration back.

        Args:
            name: Unique scheme name.
            handler_type: Protocol handler class for the scheme.
            options_type: Options class, also used to build fresh options.
            configure: Called with the fresh options before the hooks run.
            display_name: Optional human-readable name.

        Returns:
            The builder, for chaining.

        Raises:
            DuplicateSchemeError: If name is already registered.
            CallbackPathConflictError: If validation rejects the scheme.
        """
        remote = is_remote_options_type(options_type)
        if remote:
            self._install_validator(options_type)

        definition = self.definition_type(
            name=name,
            handler_type=handler_type,
            options_type=options_type,
            display_name=display_name,
        )

        with self._registration_lock:
            with self._lock:
                self._ensure_cache(options_type)
                self.provider.add_scheme(definition)
                self._configures[name] = configure

            if remote and self.validate_on_add:
                try:
                    self.get_options(name)
                except Exception:
                    logger.warning(f"Registration of scheme '{name}' rejected, rolling back")
                    self._forget(name, options_type)
                    raise

            self._handler_types.register(handler_type)
        logger.info(f"Registered scheme '{name}' ({handler_type.__name__}, {options_type.__name__})")
        return self

    def add_remote_scheme(
        self,
        name: str,
        display_name: Optional[str] = None,
        configure: Optional[ConfigureOptions] = None,
        *,
        handler_type: type,
        options_type: type = RemoteSchemeOptions,
    ) -> "DynamicAuthenticationBuilder":
        """Register a remote scheme, always installing the callback path validator.

        Raises:
            TypeError: If options_type is not a RemoteSchemeOptions subclass.
        """
        if not is_remote_options_type(options_type):
            raise TypeError(f"{options_type!r} is not a RemoteSchemeOptions subclass")

        self._install_validator(options_type)
        return self.add_scheme(name, handler_type, options_type, configure, display_name)

    def update_scheme(self, name: str, configure: Optional[ConfigureOptions]) -> None:
        """Replace a scheme's configure function and drop its cached options.

        With validate_on_add, a remote scheme is resolved again right away. A
        rejected update restores the previous configure function and its
        options, then re-raises. Otherwise the next resolution re-runs
        configuration and validation.

        Raises:
            SchemeNotFoundError: If name is not registered.
            CallbackPathConflictError: If validation rejects the new options.
        """
        definition = self._get_definition(name)
        cache = self.options_cache(definition.options_type)

        with self._registration_lock:
            with self._lock:
                previous = self._configures.get(name)
                self._configures[name] = configure
            cache.clear(name)

            if self.validate_on_add and is_remote_options_type(definition.options_type):
                try:
                    self.get_options(name)
                except Exception:
                    logger.warning(f"Update of scheme '{name}' rejected, restoring previous configuration")
                    with self._lock:
                        self._configures[name] = previous
                    cache.clear(name)
                    self.get_options(name)
                    raise

        logger.info(f"Updated scheme '{name}'")

    def remove_scheme(self, name: str) -> None:
        """Unregister a scheme and drop its cached options.

        Raises:
            SchemeNotFoundError: If name is not registered.
        """
        definition = self._get_definition(name)
        with self._registration_lock:
            self._forget(name, definition.options_type)
        logger.info(f"Removed scheme '{name}'")

    def get_options(self, name: str) -> Any:
        """Resolve a scheme's options, configuring and validating on first access.

        Raises:
            SchemeNotFoundError: If name is not registered.
            CallbackPathConflictError: If validation rejects the options.
            ProviderQueryError: If the scheme provider query fails.
        """
        definition = self._get_definition(name)
        return self.options_cache(definition.options_type).get_or_add(name, definition.options_type)

    def try_get_options(self, name: str) -> Optional[Any]:
        """Settled options for name, or None. Never resolves or blocks."""
        definition = self.provider.get_scheme(name)
        if definition is None:
            return None
        with self._lock:
            cache = self._caches.get(definition.options_type)
        return cache.try_get(name) if cache is not None else None

    def options_cache(self, options_type: type) -> OptionsCacheWrapper:
        """The options cache for an options type.

        Raises:
            KeyError: If no scheme with that options type was ever added.
        """
        with self._lock:
            return self._caches[options_type]

    def _ensure_cache(self, options_type: type) -> OptionsCacheWrapper:
        with self._lock:
            cache = self._caches.get(options_type)
            if cache is None:
                cache = OptionsCacheWrapper(options_type, configure=self._configure, hooks=self.hooks)
                self._caches[options_type] = cache
            return cache

    def _install_validator(self, options_type: type) -> None:
        if self.hooks.add(options_type, self._validator, key=CallbackPathValidator):
            logger.debug(f"Callback path validation enabled for {options_type.__name__}")

    def _configure(self, name: str, options: Any) -> None:
        with self._lock:
            configure = self._configures.get(name)
        if configure is not None:
            configure(options)

    def _get_definition(self, name: str) -> SchemeDefinition:
        definition = self.provider.get_scheme(name)
        if definition is None:
            raise SchemeNotFoundError(name)
        return definition

    def _forget(self, name: str, options_type: type) -> None:
        self.provider.remove_scheme(name)
        with self._lock:
            self._configures.pop(name, None)
        self.options_cache(options_type).clear(name)
