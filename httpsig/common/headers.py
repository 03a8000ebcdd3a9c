"""Header pre-processing run before a signing string is built."""

import datetime
from typing import Dict, Mapping, Optional

from httpsig.common.utils import http_date


def ensure_date_header(headers: Mapping[str, str],
                       now: Optional[datetime.datetime] = None) -> Dict[str, str]:
    """
    Return a copy of headers that carries a Date header.
    An existing Date header (any case) is kept; the input is never modified.
    """
    out = dict(headers)
    if not any(name.lower() == "date" for name in out):
        out["Date"] = http_date(now)
    return out
