# Copyright 2024-2025 Amiable Development
# SPDX-License-Identifier: Apache-2.0

"""Post-configuration hooks, kept as an ordered list per options type."""

import logging
import threading
from collections import defaultdict
from typing import Any, Hashable, Optional

from .types import PostConfigureHook

logger = logging.getLogger(__name__)


class PostConfigureHooks:
    """Ordered post-configuration hooks keyed by options type.

    Installing a hook is idempotent: a hook already present under the same
    key for the same options type is not added twice.

    Example:
        hooks = PostConfigureHooks()
        hooks.add(GoogleOptions, validator, key="callback-path")
        for hook in hooks.for_type(GoogleOptions):
            hook("google", options)
    """

    def __init__(self) -> None:
        self._hooks: dict[type, list[tuple[Hashable, PostConfigureHook]]] = defaultdict(list)
        self._lock = threading.Lock()

    def add(
        self,
        options_type: type,
        hook: PostConfigureHook,
        key: Optional[Hashable] = None,
    ) -> bool:
        """Install a hook for an options type.

        Args:
            options_type: Options class the hook applies to.
            hook: Callable invoked as hook(scheme_name, options).
            key: Identity used for idempotency. Defaults to the hook itself.

        Returns:
            True if the hook was installed, False if it was already present.
        """
        hook_key = hook if key is None else key
        with self._lock:
            installed = self._hooks[options_type]
            if any(existing == hook_key for existing, _ in installed):
                return False
            installed.append((hook_key, hook))

        logger.debug(f"Installed post-configure hook {hook_key!r} for {options_type.__name__}")
        return True

    def for_type(self, options_type: type) -> tuple[PostConfigureHook, ...]:
        """Return the hooks installed for an options type, in install order."""
        with self._lock:
            return tuple(hook for _, hook in self._hooks.get(options_type, ()))

    def run(self, options_type: type, name: str, options: Any) -> None:
        """Invoke every hook for options_type against a resolved options instance."""
        for hook in self.for_type(options_type):
            hook(name, options)
