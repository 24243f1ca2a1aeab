"""Read-only virtual documents for the diff view.

The diff view shows the original file content on its left side. That side is
a virtual document: its URI uses a reserved scheme and carries the whole
document body, base64-encoded UTF-8, in the query string. Because the host
asks this provider for the text, the document is read-only and users know to
edit the right side.

Malformed payloads fail loudly with DecodeError rather than producing an
empty document. Missing "=" padding is tolerated.
"""

from __future__ import annotations

import base64
import binascii
import re
from dataclasses import dataclass
from typing import TYPE_CHECKING
from urllib.parse import unquote

from sessionhost.errors import DecodeError, DuplicateRegistrationError
from sessionhost.host.protocol import Uri
from sessionhost.logging import get_logger

if TYPE_CHECKING:
    from sessionhost.host.protocol import ExtensionContext, Host, SupportsDispose

log = get_logger("content")

_BASE64_RE = re.compile(r"^[A-Za-z0-9+/]*=*$")


def encode_payload(text: str) -> str:
    """Encode a document body for use as a virtual document query."""
    return base64.b64encode(text.encode("utf-8")).decode("ascii")


def decode_payload(payload: str) -> str:
    """Decode a virtual document query back into the document body.

    Raises:
        DecodeError: If payload is not base64 or does not decode to UTF-8.
    """
    if not _BASE64_RE.match(payload):
        raise DecodeError(payload, "invalid base64 characters")

    core = payload.rstrip("=")
    if len(core) % 4 == 1:
        raise DecodeError(payload, "truncated base64 data")
    padded = core + "=" * (-len(core) % 4)

    try:
        raw = base64.b64decode(padded, validate=True)
    except binascii.Error as e:
        raise DecodeError(payload, str(e)) from e

    try:
        return raw.decode("utf-8")
    except UnicodeDecodeError as e:
        raise DecodeError(payload, "payload is not valid UTF-8") from e


def build_diff_uri(scheme: str, path: str, text: str) -> Uri:
    """Build the URI the diff view opens for the original side of a file."""
    return Uri(scheme=scheme, path=path, query=encode_payload(text))


@dataclass(frozen=True)
class VirtualDocumentRequest:
    """The part of a virtual document URI that carries the content."""

    encoded_payload: str

    @classmethod
    def from_uri(cls, uri: Uri) -> VirtualDocumentRequest:
        # Hosts may hand over the query still percent-encoded
        return cls(encoded_payload=unquote(uri.query))

    def decode(self) -> str:
        return decode_payload(self.encoded_payload)


class DiffContentProvider:
    """Serves the original side of diff comparisons.

    Registered with the host under one scheme, at most once.
    """

    def __init__(self, scheme: str) -> None:
        self.scheme = scheme
        self._registration: SupportsDispose | None = None

    def provide_content(self, uri: Uri) -> str:
        """Return the document body carried by uri.

        Raises:
            DecodeError: If the query is not valid base64-encoded UTF-8.
        """
        return VirtualDocumentRequest.from_uri(uri).decode()

    def build_uri(self, path: str, text: str) -> Uri:
        return build_diff_uri(self.scheme, path, text)

    def register(self, host: Host, context: ExtensionContext) -> SupportsDispose:
        """Claim the scheme with the host.

        Raises:
            DuplicateRegistrationError: If this provider is already registered.
        """
        if self._registration is not None:
            raise DuplicateRegistrationError("content provider scheme", self.scheme)
        registration = host.register_content_provider(self.scheme, self)
        context.subscriptions.append(registration)
        self._registration = registration
        log.debug("Registered content provider for scheme %r", self.scheme)
        return registration
