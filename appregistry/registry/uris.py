"""URI checks for registration input."""

from __future__ import annotations

import re
from typing import Optional

from appregistry.registry.exceptions import InvalidAppUriError

_SCHEME = re.compile(r"^[A-Za-z][A-Za-z0-9+.\-]*:")
_ILLEGAL = re.compile(r"[\s<>\"{}|\\^`]")


def validate_uri(uri: str) -> str:
    """Return ``uri`` unchanged, or raise ``InvalidAppUriError``.

    A registration URI must be absolute (carry a scheme) and contain no
    characters that are illegal in a URI.
    """
    if not uri:
        raise InvalidAppUriError(uri, "URI is empty")
    if _ILLEGAL.search(uri):
        raise InvalidAppUriError(uri, "URI contains illegal characters")
    if not _SCHEME.match(uri):
        raise InvalidAppUriError(uri, "URI has no scheme")
    if uri.endswith(":"):
        raise InvalidAppUriError(uri, "URI has nothing after the scheme")
    return uri


def validate_optional_uri(uri: Optional[str]) -> Optional[str]:
    return validate_uri(uri) if uri is not None else None
