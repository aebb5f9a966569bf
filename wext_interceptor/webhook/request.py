"""
Inbound webhook request wrapper.

Holds the method, a case-insensitive multi-value header mapping and a
request body that can be consumed exactly once.
"""

import io
from collections.abc import Iterable, Mapping
from typing import BinaryIO, Optional, Union

from starlette.datastructures import Headers

from ..utils.exceptions import RequestBodyError, WebhookDecodeError

HeaderInput = Union[Headers, Mapping[str, str], Iterable[tuple[str, str]]]


def _as_headers(headers: HeaderInput) -> Headers:
    """
    Wrap plain mappings or (name, value) pairs in a starlette ``Headers``.

    Names and values must be latin-1 encodable, as on the HTTP wire.

    Raises:
        WebhookDecodeError: A header name or value is not latin-1 encodable
    """
    if isinstance(headers, Headers):
        return headers
    items = headers.items() if isinstance(headers, Mapping) else headers
    raw = []
    for name, value in items:
        try:
            raw.append((name.lower().encode("latin-1"), value.encode("latin-1")))
        except UnicodeEncodeError as e:
            raise WebhookDecodeError(f"Header {name!r} is not latin-1 encodable: {e}") from e
    return Headers(raw=raw)


class RawRequest:
    """
    A webhook request as received over HTTP.

    ``body`` may be bytes or a readable binary stream. Either way it is
    released once through ``read_body``; a second read raises
    ``RequestBodyError``. Plain header mappings must hold latin-1
    encodable names and values; anything else is a ``WebhookDecodeError``.
    """

    def __init__(
        self,
        headers: HeaderInput,
        body: Union[bytes, BinaryIO],
        method: str = "POST",
    ):
        self.method = method.upper()
        self.headers = _as_headers(headers)
        self._stream: Optional[BinaryIO] = io.BytesIO(body) if isinstance(body, (bytes, bytearray)) else body
        self._consumed = False

    @property
    def body_consumed(self) -> bool:
        return self._consumed

    def header(self, name: str) -> Optional[str]:
        """First value of a header, or None when absent."""
        return self.headers.get(name)

    def header_values(self, name: str) -> list[str]:
        """All values of a header, in received order."""
        return self.headers.getlist(name)

    def read_body(self) -> bytes:
        """
        Read and release the request body.

        Raises:
            RequestBodyError: If the body was already read or the stream fails
        """
        if self._consumed:
            raise RequestBodyError("Request body has already been read", reason="consumed")

        self._consumed = True
        stream, self._stream = self._stream, None
        try:
            return stream.read()
        except OSError as e:
            raise RequestBodyError(f"Failed to read request body: {e}", reason="read_error") from e
