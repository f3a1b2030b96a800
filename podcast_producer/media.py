"""Read media sources given as data URLs, http(s) URLs, file URIs or paths."""

import base64
import os
from urllib.parse import unquote, unquote_to_bytes, urlparse

import requests

from podcast_producer.constants import HTTP_TIMEOUT_S


def is_data_url(url: str) -> bool:
    return url.startswith("data:")


def decode_data_url(url: str) -> bytes:
    """Decode a data URL (base64 or percent-encoded) into bytes."""
    header, sep, payload = url.partition(",")
    if not sep:
        raise ValueError("Malformed data URL")
    if header.endswith(";base64"):
        return base64.b64decode(payload)
    return unquote_to_bytes(payload)


def to_data_url(data: bytes, mime_type: str) -> str:
    return f"data:{mime_type};base64,{base64.b64encode(data).decode('ascii')}"


def load_source(url: str, timeout: float = HTTP_TIMEOUT_S) -> bytes:
    """Return the raw bytes behind a media reference.

    Raises ValueError for malformed data URLs, OSError for unreadable files
    and requests.RequestException for failed downloads.
    """
    if is_data_url(url):
        return decode_data_url(url)

    parsed = urlparse(url)
    if parsed.scheme in ("http", "https"):
        response = requests.get(url, timeout=timeout)
        response.raise_for_status()
        return response.content

    if parsed.scheme == "file":
        path = unquote(parsed.path)
    else:
        path = url
    with open(os.path.expanduser(path), "rb") as f:
        return f.read()
