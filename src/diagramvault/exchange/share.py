"""Share one diagram through a ``shared`` query parameter.

The payload ``{name, code, theme}`` is compact JSON, UTF-8 encoded, then
base64 encoded, so diagram text with emoji or other non-ASCII characters
survives the trip. Decoding runs on every page load with whatever URL the
app was opened with, so it returns None instead of raising.
"""

from __future__ import annotations

import base64
import binascii
import json
import logging
from dataclasses import dataclass
from urllib.parse import parse_qsl, urlencode, urlsplit, urlunsplit

from diagramvault import config
from diagramvault.clock import new_id, now_ms
from diagramvault.storage.records import DEFAULT_THEME, THEMES, DiagramRecord

logger = logging.getLogger(__name__)

SHARE_PARAM = "shared"
SHARED_SUFFIX = " (Shared)"


@dataclass(frozen=True)
class SharePayload:
    name: str
    code: str
    theme: str = DEFAULT_THEME

    @classmethod
    def from_diagram(cls, diagram: DiagramRecord) -> SharePayload:
        return cls(name=diagram.name, code=diagram.code, theme=diagram.theme)


def encode_share_payload(payload: SharePayload) -> str:
    data = {"name": payload.name, "code": payload.code, "theme": payload.theme}
    raw = json.dumps(data, ensure_ascii=False, separators=(",", ":")).encode("utf-8")
    return base64.b64encode(raw).decode("ascii")


def decode_share_payload(token: str) -> SharePayload | None:
    """Reverse encode_share_payload. Returns None for anything malformed."""
    # parse_qs turns an unescaped "+" into a space
    token = token.replace(" ", "+")
    try:
        raw = base64.b64decode(token, validate=True)
        data = json.loads(raw.decode("utf-8"))
    except (binascii.Error, ValueError, RecursionError) as e:
        logger.debug("Ignoring undecodable share payload: %s", e)
        return None

    if not isinstance(data, dict):
        return None
    name, code = data.get("name"), data.get("code")
    if not isinstance(name, str) or not name or not isinstance(code, str):
        logger.debug("Ignoring share payload without name/code")
        return None
    theme = data.get("theme")
    return SharePayload(name=name, code=code, theme=theme if theme in THEMES else DEFAULT_THEME)


def _params_without_share(url: str) -> list[tuple[str, str]]:
    query = urlsplit(url).query
    return [(k, v) for k, v in parse_qsl(query, keep_blank_values=True) if k != SHARE_PARAM]


def _with_query(url: str, params: list[tuple[str, str]]) -> str:
    parts = urlsplit(url)
    return urlunsplit(parts._replace(query=urlencode(params)))


def share_url_for(payload: SharePayload, base_url: str | None = None) -> str:
    """Build the app URL carrying ``payload``; other query params are kept."""
    url = base_url or config.PUBLIC_URL
    params = _params_without_share(url)
    params.append((SHARE_PARAM, encode_share_payload(payload)))
    return _with_query(url, params)


def payload_from_url(url: str) -> SharePayload | None:
    """Decode the ``shared`` parameter of ``url``, or None if absent or invalid."""
    try:
        query = urlsplit(url).query
    except ValueError:
        return None
    for key, value in parse_qsl(query, keep_blank_values=True):
        if key == SHARE_PARAM:
            return decode_share_payload(value)
    return None


def diagram_from_url(url: str) -> DiagramRecord | None:
    """Turn a share URL into a new, unsaved diagram named ``"<name> (Shared)"``."""
    payload = payload_from_url(url)
    if payload is None:
        return None
    ts = now_ms()
    return DiagramRecord(
        id=new_id(),
        name=payload.name + SHARED_SUFFIX,
        code=payload.code,
        theme=payload.theme,
        created_at=ts,
        updated_at=ts,
    )


def strip_share_param(url: str) -> str:
    """Return ``url`` without the ``shared`` parameter so a reload won't re-import.

    A URL that cannot be split is returned unchanged.
    """
    try:
        params = _params_without_share(url)
        if len(params) == len(parse_qsl(urlsplit(url).query, keep_blank_values=True)):
            return url
    except ValueError:
        return url
    return _with_query(url, params)
