# Copyright 2024-2025 Amiable Development
# SPDX-License-Identifier: Apache-2.0

"""
Core types for dynamic authentication schemes.

Handler and options types are plain Python classes used as capability tags.
The options class is also the factory for a fresh options instance; a scheme
is remote when its options class derives from RemoteSchemeOptions.
"""

from dataclasses import dataclass
from typing import Any, Callable, Optional, TypeVar

TOptions = TypeVar("TOptions", bound="AuthenticationSchemeOptions")

# configure(options) captured at registration time
ConfigureOptions = Callable[[Any], None]

# hook(scheme_name, options) run after every resolution
PostConfigureHook = Callable[[str, Any], None]


@dataclass
class AuthenticationSchemeOptions:
    """Base options shared by every scheme.

    Attributes:
        claims_issuer: Issuer recorded on claims the handler creates.
    """

    claims_issuer: Optional[str] = None


@dataclass
class RemoteSchemeOptions(AuthenticationSchemeOptions):
    """Options for a scheme that completes its handshake through a redirect.

    Attributes:
        callback_path: URL path receiving the redirect callback. Empty means
            no callback is configured.
        sign_in_scheme: Scheme that persists the identity after the callback.
    """

    callback_path: str = ""
    sign_in_scheme: Optional[str] = None


@dataclass(frozen=True)
class SchemeDefinition:
    """Identity of one registered scheme.

    Attributes:
        name: Unique scheme name.
        handler_type: Class of the protocol handler processing this scheme.
        options_type: Class describing the scheme's configuration.
        display_name: Optional human-readable name.
    """

    name: str
    handler_type: type
    options_type: type
    display_name: Optional[str] = None

    @property
    def is_remote(self) -> bool:
        return is_remote_options_type(self.options_type)


def is_remote_options_type(options_type: type) -> bool:
    """Check whether an options class describes a remote scheme."""
    return isinstance(options_type, type) and issubclass(options_type, RemoteSchemeOptions)
