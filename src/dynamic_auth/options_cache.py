# Copyright 2024-2025 Amiable Development
# SPDX-License-Identifier: Apache-2.0

"""
Options cache wrapper.

Resolves the options of one options type lazily, once per scheme name:
- factory() builds a fresh instance
- the registration-time configure function customises it
- post-configuration hooks (e.g. callback path validation) inspect it
- the result is cached until cleared

Thread Safety:
- Resolution is atomic per name. Concurrent first access to one name runs
  the factory and the hooks exactly once; every caller receives the same
  instance or the same exception.
- The internal lock only guards the bookkeeping dicts. It is never held while
  a factory, configure function or hook runs, so unrelated names resolve in
  parallel and hooks may look up other names.
"""

import logging
import threading
from dataclasses import dataclass, field
from typing import Any, Callable, Generic, Optional

from .errors import RecursiveResolutionError
from .hooks import PostConfigureHooks
from .types import TOptions

logger = logging.getLogger(__name__)


@dataclass
class _Resolution:
    """An in-flight resolution of one name."""

    thread_id: int
    cancelled: bool = False
    done: threading.Event = field(default_factory=threading.Event)
    value: Any = None
    error: Optional[BaseException] = None


class OptionsCacheWrapper(Generic[TOptions]):
    """Get-or-add cache of resolved options for a single options type.

    Usage:
        cache = OptionsCacheWrapper(GoogleOptions, configure=apply, hooks=hooks)
        options = cache.get_or_add("google", GoogleOptions)
        cache.clear("google")  # next get_or_add re-resolves and re-validates

    Attributes:
        options_type: Options class whose instances this cache holds.
    """

    def __init__(
        self,
        options_type: type,
        configure: Optional[Callable[[str, Any], None]] = None,
        hooks: Optional[PostConfigureHooks] = None,
    ) -> None:
        """Initialize the cache.

        Args:
            options_type: Options class cached by this wrapper.
            configure: Called as configure(name, options) before the hooks.
            hooks: Post-configuration hooks, looked up for options_type on
                every resolution so hooks installed later still apply.
        """
        self.options_type = options_type
        self._configure = configure
        self._hooks = hooks if hooks is not None else PostConfigureHooks()

        self._entries: dict[str, TOptions] = {}
        self._pending: dict[str, _Resolution] = {}
        self._lock = threading.Lock()

    def get_or_add(self, name: str, factory: Callable[[], Optional[TOptions]]) -> Optional[TOptions]:
        """Return the cached options for name, resolving them on first access.

        Args:
            name: Scheme name.
            factory: Builds a fresh options instance. Returning None stores
                nothing and returns None.

        Returns:
            The cached or newly resolved options.

        Raises:
            RecursiveResolutionError: If this thread is already resolving name.
            Exception: Whatever the factory, configure function or a hook
                raised. Nothing is cached in that case.
        """
        current = threading.get_ident()
        with self._lock:
            cached = self._entries.get(name)
            if cached is not None:
                logger.debug(f"Options cache hit for '{name}' ({self.options_type.__name__})")
                return cached

            resolution = self._pending.get(name)
            owner = resolution is None
            if owner:
                resolution = _Resolution(thread_id=current)
                self._pending[name] = resolution
            elif resolution.thread_id == current:
                raise RecursiveResolutionError(name)

        if not owner:
            resolution.done.wait()
            if resolution.error is not None:
                raise resolution.error
            return resolution.value

        try:
            resolution.value = self._resolve(name, factory)
        except BaseException as e:
            resolution.error = e
            logger.debug(f"Resolution of '{name}' ({self.options_type.__name__}) failed: {e}")
            raise
        finally:
            with self._lock:
                if self._pending.get(name) is resolution:
                    del self._pending[name]
                if (
                    resolution.error is None
                    and resolution.value is not None
                    and not resolution.cancelled
                ):
                    self._entries[name] = resolution.value
            resolution.done.set()

        return resolution.value

    def try_get(self, name: str) -> Optional[TOptions]:
        """Return the settled options for name without resolving or waiting.

        Equivalent to get_or_add with a no-op factory under a skip-if-resolving
        policy: None when the name is absent or currently being resolved.
        """
        with self._lock:
            return self._entries.get(name)

    def clear(self, name: str) -> bool:
        """Drop the cached options for name.

        A resolution in flight for name completes for its own callers but its
        result is not cached.

        Returns:
            True if a settled entry was removed.
        """
        with self._lock:
            removed = self._entries.pop(name, None) is not None
            pending = self._pending.pop(name, None)
            if pending is not None:
                pending.cancelled = True

        if removed:
            logger.debug(f"Cleared cached options for '{name}' ({self.options_type.__name__})")
        return removed

    def clear_all(self) -> None:
        """Drop every cached entry."""
        with self._lock:
            for pending in self._pending.values():
                pending.cancelled = True
            self._entries.clear()
            self._pending.clear()

    def names(self) -> tuple[str, ...]:
        """Names with settled entries."""
        with self._lock:
            return tuple(self._entries)

    def __contains__(self, name: object) -> bool:
        with self._lock:
            return name in self._entries

    def __len__(self) -> int:
        with self._lock:
            return len(self._entries)

    def _resolve(self, name: str, factory: Callable[[], Optional[TOptions]]) -> Optional[TOptions]:
        options = factory()
        if options is None:
            return None

        if self._configure is not None:
            self._configure(name, options)

        self._hooks.run(self.options_type, name, options)
        logger.debug(f"Resolved options for '{name}' ({self.options_type.__name__})")
        return options
