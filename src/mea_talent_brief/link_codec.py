"""Self-contained share links: a newsletter encoded into a single query value.

Tokens are unpadded URL-safe base64 over compact ASCII JSON in the wire
(camelCase) form, so they pass through URL-encoding layers unchanged and can
be decoded by any holder without contacting a service.
"""

from __future__ import annotations

import base64
import json
import logging
import re
from typing import Optional
from urllib.parse import parse_qsl, urlencode, urlsplit, urlunsplit

from .models import Document
from .schema import NEWSLETTER_SCHEMA, validate_payload

logger = logging.getLogger(__name__)

VIEW_PARAM = "view"
VIEW_VALUE = "newsletter"
DATA_PARAM = "data"

_TOKEN_PATTERN = re.compile(r"^[A-Za-z0-9_-]+$")


def encode(document: Document) -> str:
    """Return the share token for ``document``, or "" when it cannot be serialized."""
    try:
        text = json.dumps(document.to_wire(), separators=(",", ":"))
        raw = text.encode("utf-8")
    except Exception:
        logger.exception("Encoding newsletter for share link failed")
        return ""
    return base64.urlsafe_b64encode(raw).decode("ascii").rstrip("=")


def decode(token: object) -> Optional[Document]:
    """Inverse of :func:`encode`; returns None for any malformed token."""
    if not isinstance(token, str):
        return None
    text = token.strip()
    # A base64 body can never leave a single trailing character.
    if not text or not _TOKEN_PATTERN.match(text) or len(text) % 4 == 1:
        logger.debug("Rejected share token with invalid alphabet or length")
        return None
    padded = text + "=" * (-len(text) % 4)
    try:
        raw = base64.urlsafe_b64decode(padded)
        data = json.loads(raw.decode("utf-8"))
        validate_payload(data, NEWSLETTER_SCHEMA)
        return Document.from_wire(data)
    except (ValueError, TypeError, RecursionError) as exc:
        logger.debug("Decoding share token failed: %s", exc)
        return None


def build_share_url(base_url: str, document: Document) -> str:
    """Return ``<base>?view=newsletter&data=<token>``, or "" if encoding fails."""
    token = encode(document)
    if not token:
        return ""
    parts = urlsplit(base_url)
    query = urlencode([(VIEW_PARAM, VIEW_VALUE), (DATA_PARAM, token)])
    return urlunsplit((parts.scheme, parts.netloc, parts.path or "/", query, ""))


def extract_shared_token(location: str) -> Optional[str]:
    """Return the data token when ``location`` is a shared-view link, else None.

    Both the view flag and a non-empty token must be present.
    """
    params = dict(parse_qsl(urlsplit(location or "").query, keep_blank_values=True))
    if params.get(VIEW_PARAM) != VIEW_VALUE:
        return None
    token = params.get(DATA_PARAM, "")
    return token or None


def strip_share_params(location: str) -> str:
    """Remove the shared-view parameters from ``location``, keeping everything else."""
    parts = urlsplit(location or "")
    kept = [
        (key, value)
        for key, value in parse_qsl(parts.query, keep_blank_values=True)
        if key not in (VIEW_PARAM, DATA_PARAM)
    ]
    return urlunsplit(
        (parts.scheme, parts.netloc, parts.path, urlencode(kept), parts.fragment)
    )
