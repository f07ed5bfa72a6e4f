# Copyright 2024-2025 Amiable Development
# SPDX-License-Identifier: Apache-2.0

"""
Callback path uniqueness validation.

Runs as a post-configuration hook whenever the options of a remote scheme are
resolved. It lists every scheme known to the provider, looks up the settled
options of each other scheme and rejects the resolution when two remote
schemes share a non-empty callback path.

Known limitation: schemes whose options have not been resolved yet are
skipped. Validation completeness therefore depends on resolution order; the
later of two conflicting schemes is the one rejected.
"""

import asyncio
import inspect
import logging
from concurrent.futures import ThreadPoolExecutor
from dataclasses import dataclass
from typing import Any, Awaitable, Callable, Iterable, Optional

from .errors import CallbackPathConflictError, ProviderQueryError
from .provider import SchemeProvider
from .types import RemoteSchemeOptions

logger = logging.getLogger(__name__)


@dataclass
class SchemeContext:
    """What the validator needs to see of the host.

    Attributes:
        provider: Source of every known scheme name.
        lookup: Returns the settled options of a scheme, or None when they are
            absent or still being resolved. Must not block or create options.
    """

    provider: SchemeProvider
    lookup: Callable[[str], Optional[Any]]


async def _await(awaitable: Awaitable[Any]) -> Any:
    return await awaitable


def _wait_for(result: Any) -> Any:
    """Drive an awaitable to completion from synchronous code."""
    if not inspect.isawaitable(result):
        return result

    try:
        asyncio.get_running_loop()
    except RuntimeError:
        return asyncio.run(_await(result))

    # Called from inside a running loop: run the query on its own loop in a worker
    with ThreadPoolExecutor(max_workers=1) as executor:
        return executor.submit(asyncio.run, _await(result)).result()


class CallbackPathValidator:
    """Post-configuration hook enforcing unique callback paths.

    Example:
        validator = CallbackPathValidator(SchemeContext(provider, builder.try_get_options))
        hooks.add(GoogleOptions, validator, key=CallbackPathValidator)
    """

    def __init__(self, context: SchemeContext, case_sensitive: bool = False) -> None:
        self.context = context
        self.case_sensitive = case_sensitive

    def __call__(self, name: str, options: Any) -> None:
        self.validate(name, options)

    def validate(self, name: str, options: Any) -> None:
        """Check options against every other resolved remote scheme.

        Raises:
            ProviderQueryError: If the provider cannot list the schemes.
            CallbackPathConflictError: If another scheme uses the same path.
        """
        if not isinstance(options, RemoteSchemeOptions):
            return

        scheme_names = self._list_scheme_names(name)
        if not options.callback_path:
            return

        path = self._normalize(options.callback_path)
        for other_name in scheme_names:
            if other_name == name:
                continue

            other = self.context.lookup(other_name)
            if other is None or other is options or not isinstance(other, RemoteSchemeOptions):
                continue

            if other.callback_path and self._normalize(other.callback_path) == path:
                logger.warning(
                    f"Scheme '{name}' rejected: callback path {options.callback_path} "
                    f"is already used by '{other_name}'"
                )
                raise CallbackPathConflictError(name, other_name, options.callback_path)

    def _list_scheme_names(self, name: str) -> Iterable[str]:
        try:
            return list(_wait_for(self.context.provider.list_scheme_names()))
        except Exception as e:
            logger.error(f"Scheme provider query failed while validating '{name}': {e}")
            raise ProviderQueryError(name, e) from e

    def _normalize(self, path: str) -> str:
        return path if self.case_sensitive else path.casefold()
