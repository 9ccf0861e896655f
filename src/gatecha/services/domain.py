"""Origin checks for domain-restricted API keys."""

from __future__ import annotations

from urllib.parse import urlsplit


def extract_hostname(value: str | None) -> str:
    """Return the lowercase hostname of an Origin/Referer header value.

    Scheme, port and path are discarded. Values without a scheme are treated
    as ``host[:port][/path]``.
    """
    if not value:
        return ""
    value = value.strip()
    if "://" not in value:
        value = f"//{value}"
    try:
        return (urlsplit(value).hostname or "").lower()
    except ValueError:
        return ""


def is_origin_allowed(domain: str, origin: str | None, referer: str | None) -> bool:
    """Decide whether a request may use a key restricted to ``domain``.

    An empty ``domain`` is unrestricted, and requests without an Origin header
    are not checked. Otherwise the hostname of either Origin or Referer must
    equal ``domain`` (case-insensitive).
    """
    domain = (domain or "").strip().lower()
    if not domain or not origin:
        return True
    return domain in (extract_hostname(origin), extract_hostname(referer))
