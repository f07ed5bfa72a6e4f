# Copyright 2024-2025 Amiable Development
# SPDX-License-Identifier: Apache-2.0

"""
Handler type registry for dynamic scheme management.

Records which protocol handler classes participate in dynamic schemes.
Duplicates are kept: several schemes may share one handler type.

Thread Safety:
- Registration and listing are guarded by a lock
- Listing returns an immutable snapshot taken at call time
"""

import logging
import threading

logger = logging.getLogger(__name__)


class HandlerTypeRegistry:
    """Bookkeeping of handler types used by dynamically added schemes.

    Usage:
        registry = HandlerTypeRegistry()
        registry.register(GoogleHandler)
        for handler_type in registry.list_handler_types():
            ...
    """

    def __init__(self) -> None:
        self._handler_types: list[type] = []
        self._lock = threading.Lock()

    def register(self, handler_type: type) -> None:
        """Add a handler type. Duplicates are permitted."""
        with self._lock:
            self._handler_types.append(handler_type)
        logger.debug(f"Registered handler type {getattr(handler_type, '__name__', handler_type)}")

    def list_handler_types(self) -> tuple[type, ...]:
        """Return the handler types registered so far, in registration order."""
        with self._lock:
            return tuple(self._handler_types)

    def __len__(self) -> int:
        with self._lock:
            return len(self._handler_types)

    def __contains__(self, handler_type: object) -> bool:
        with self._lock:
            return handler_type in self._handler_types
