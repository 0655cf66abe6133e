# secureguard/normalize.py
"""
Turns raw user input into a `NormalizedUrl` or a validation error.

Rules:
- whitespace-only input -> EmptyInputError
- "http://" / "https://" prefixes are kept (scheme lower-cased)
- everything else gets "https://" prepended, so "example.com" is scored as
  "https://example.com" and "ftp://example.com" as a URL whose host is "ftp"
- the result must parse with a non-empty host, a valid port and no forbidden
  host characters, otherwise InvalidUrlError
- non-ASCII hosts are converted to their IDNA (punycode) form
"""
from __future__ import annotations

import logging
import re
from urllib.parse import urlsplit

from secureguard.errors import EmptyInputError, InvalidUrlError
from secureguard.models import NormalizedUrl

log = logging.getLogger(__name__)

DEFAULT_SCHEME = "https"

_SCHEME_PREFIX_RE = re.compile(r"^(https?)://", re.IGNORECASE)

# Characters a host can never contain, even before IDNA processing.
FORBIDDEN_HOST_CHARS = frozenset(' <>^|\\"`{}')


def _has_forbidden_host_chars(host: str) -> bool:
    return any(ch in FORBIDDEN_HOST_CHARS or ord(ch) < 0x20 or ord(ch) == 0x7F for ch in host)


def ensure_scheme(text: str) -> str:
    """
    Return `text` with an http(s) scheme, prepending the secure default when
    it does not already start with one.
    """
    m = _SCHEME_PREFIX_RE.match(text)
    if m is None:
        return f"{DEFAULT_SCHEME}://{text}"
    return m.group(1).lower() + text[len(m.group(1)):]


def to_ascii_host(host: str) -> str:
    """IDNA-encode a non-ASCII host. Raises InvalidUrlError when it cannot be."""
    if host.isascii():
        return host
    try:
        return host.encode("idna").decode("ascii")
    except UnicodeError as e:
        log.debug("Could not IDNA-encode %r: %s", host, e)
        raise InvalidUrlError() from e


def normalize(raw: str) -> NormalizedUrl:
    """Validate `raw` and return its canonical form."""
    text = (raw or "").strip()
    if not text:
        raise EmptyInputError()

    canonical = ensure_scheme(text)

    try:
        parts = urlsplit(canonical)
        host = parts.hostname or ""
        # Accessing .port validates it (non-numeric or out of range -> ValueError).
        _ = parts.port
    except ValueError as e:
        log.debug("Could not parse %r: %s", canonical, e)
        raise InvalidUrlError() from e

    if not host or _has_forbidden_host_chars(host):
        log.debug("No usable host in %r", canonical)
        raise InvalidUrlError()

    return NormalizedUrl(
        raw=raw,
        canonical=canonical,
        scheme=parts.scheme,
        host=to_ascii_host(host),
        path=parts.path,
    )


def is_valid_url(raw: str) -> bool:
    """True when `raw` would normalize without error."""
    try:
        normalize(raw)
    except (EmptyInputError, InvalidUrlError):
        return False
    return True
