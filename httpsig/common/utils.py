"""Helper encodings: b64e, b64d, http_date."""

import base64
import datetime
from email.utils import format_datetime
from typing import Optional


def b64e(b: bytes) -> str:
    """Base64-encode bytes → single-line ASCII string (no wrapping)."""
    return base64.b64encode(b).decode("ascii")


def b64d(s) -> bytes:
    """
    Strict base64 decode of a string or bytes.
    Raises binascii.Error on characters outside the alphabet or bad padding.
    """
    if isinstance(s, str):
        s = s.encode("ascii")
    return base64.b64decode(s.strip(), validate=True)


def http_date(dt: Optional[datetime.datetime] = None) -> str:
    """Return an RFC 7231 IMF-fixdate, e.g. 'Sun, 06 Nov 1994 08:49:37 GMT'."""
    if dt is None:
        dt = datetime.datetime.now(datetime.timezone.utc)
    elif dt.tzinfo is None:
        dt = dt.replace(tzinfo=datetime.timezone.utc)
    else:
        dt = dt.astimezone(datetime.timezone.utc)
    return format_datetime(dt, usegmt=True)
