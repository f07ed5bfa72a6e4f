# Copyright 2024-2025 Amiable Development
# SPDX-License-Identifier: Apache-2.0

"""
Scheme provider contract and an in-memory implementation.

The provider is the source of truth for which schemes exist. The callback
path validator asks it for every known scheme name, so it must reflect
schemes registered after process start.
"""

import logging
import threading
from typing import Awaitable, Iterable, Optional, Protocol, Union, runtime_checkable

from .errors import DuplicateSchemeError
from .types import SchemeDefinition

logger = logging.getLogger(__name__)


@runtime_checkable
class SchemeProvider(Protocol):
    """
    Source of the currently known scheme names.

    Implementations may be synchronous or return an awaitable; the validator
    drives awaitables to completion before validating.
    """

    def list_scheme_names(self) -> Union[Iterable[str], Awaitable[Iterable[str]]]:
        """
        List every scheme registered so far.

        Returns:
            Scheme names, or an awaitable resolving to them.
        """
        ...


class InMemorySchemeProvider:
    """Thread-safe scheme provider backed by a dict.

    Usage:
        provider = InMemorySchemeProvider()
        provider.add_scheme(SchemeDefinition("google", GoogleHandler, GoogleOptions))
        provider.list_scheme_names()  # ["google"]
    """

    def __init__(self, schemes: Optional[Iterable[SchemeDefinition]] = None) -> None:
        self._schemes: dict[str, SchemeDefinition] = {}
        self._lock = threading.RLock()
        for scheme in schemes or ():
            self.add_scheme(scheme)

    def add_scheme(self, scheme: SchemeDefinition) -> None:
        """Add a scheme.

        Raises:
            DuplicateSchemeError: If a scheme with the same name exists.
        """
        with self._lock:
            if scheme.name in self._schemes:
                raise DuplicateSchemeError(scheme.name)
            self._schemes[scheme.name] = scheme
        logger.info(f"Added scheme '{scheme.name}'")

    def remove_scheme(self, name: str) -> bool:
        """Remove a scheme by name. Returns True if it existed."""
        with self._lock:
            removed = self._schemes.pop(name, None) is not None
        if removed:
            logger.info(f"Removed scheme '{name}'")
        return removed

    def get_scheme(self, name: str) -> Optional[SchemeDefinition]:
        with self._lock:
            return self._schemes.get(name)

    def get_all_schemes(self) -> list[SchemeDefinition]:
        with self._lock:
            return list(self._schemes.values())

    def list_scheme_names(self) -> list[str]:
        with self._lock:
            return list(self._schemes)
