# Copyright 2024-2025 Amiable Development
# SPDX-License-Identifier: Apache-2.0

"""Exceptions raised by dynamic scheme registration and option resolution."""


class DynamicAuthError(Exception):
    """Base exception for dynamic authentication scheme errors."""

    pass


class ConflictError(DynamicAuthError):
    """Raised when two schemes claim a resource that must be unique."""

    pass


class CallbackPathConflictError(ConflictError):
    """Raised when two remote schemes share the same non-empty callback path.

    Attributes:
        scheme_name: Scheme whose options were being resolved.
        other_scheme_name: Already-resolved scheme holding the same path.
        callback_path: The offending callback path.
    """

    def __init__(self, scheme_name: str, other_scheme_name: str, callback_path: str):
        self.scheme_name = scheme_name
        self.other_scheme_name = other_scheme_name
        self.callback_path = callback_path
        super().__init__(
            f"Callback paths for schemes '{scheme_name}' and '{other_scheme_name}' "
            f"are equal: {callback_path}"
        )


class ProviderQueryError(DynamicAuthError):
    """Raised when the scheme provider cannot list the known schemes."""

    def __init__(self, scheme_name: str, cause: Exception):
        self.scheme_name = scheme_name
        self.cause = cause
        super().__init__(
            f"Cannot validate scheme '{scheme_name}': scheme provider query failed: {cause}"
        )


class DuplicateSchemeError(DynamicAuthError):
    """Raised when registering a scheme name that already exists."""

    def __init__(self, name: str):
        self.name = name
        super().__init__(f"Scheme '{name}' already exists")


class SchemeNotFoundError(DynamicAuthError):
    """Raised when a scheme name is not registered."""

    def __init__(self, name: str):
        self.name = name
        super().__init__(f"No scheme registered with name '{name}'")


class RecursiveResolutionError(DynamicAuthError):
    """Raised when a thread re-enters the resolution of an entry it is resolving."""

    def __init__(self, name: str):
        self.name = name
        super().__init__(f"Options for '{name}' are already being resolved by this thread")


class ConfigError(DynamicAuthError):
    """Raised when a scheme configuration file holds invalid declarations."""

    pass
