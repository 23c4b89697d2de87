"""
Domain parsing for the website blocker.

User input is free-form ("https://www.Example.com/path", "example.com").
`validate_domain` reduces it to the canonical host that the blocklist stores,
and `domain_variants` lists the aliases written into the hosts file for it.
"""

from __future__ import annotations

import ipaddress
import re
from typing import List
from urllib.parse import urlsplit

from website_blocker.errors import InvalidFormatError, MissingHostError

VARIANT_PREFIXES = ("www.", "m.", "app.")

# Scheme first, then "www.", applied to the result of the previous strip.
_PREFIX_RE = re.compile(r"^(?:https?://)?(?:www\.)?", re.IGNORECASE)
_HOST_RE = re.compile(r"^[a-z0-9_.-]+$")


def strip_prefixes(raw: str) -> str:
    return _PREFIX_RE.sub("", raw.strip(), count=1)


def validate_domain(raw: str) -> str:
    """Return the canonical domain for `raw`.

    Non-ASCII names are returned in their IDNA (punycode) form. Raises
    MissingHostError for empty input or a URL without a host, and
    InvalidFormatError when the text cannot be parsed as a URL or names an
    IP address rather than a domain.
    """
    cleaned = strip_prefixes(raw)
    if not cleaned:
        raise MissingHostError("Invalid host")
    try:
        parsed = urlsplit(f"http://{cleaned}")
        # Accessing .port validates it; urlsplit alone does not.
        parsed.port
    except ValueError as exc:
        raise InvalidFormatError("Invalid URL format") from exc
    host = parsed.hostname
    if not host:
        raise MissingHostError("Invalid host")
    host = host.lower().rstrip(".")
    if not host:
        raise MissingHostError("Invalid host")
    try:
        ipaddress.ip_address(host)
    except ValueError:
        pass
    else:
        raise InvalidFormatError("IP addresses cannot be blocked, enter a domain")
    try:
        host = host.encode("idna").decode("ascii")
    except UnicodeError as exc:
        raise InvalidFormatError("Invalid URL format") from exc
    if not _HOST_RE.match(host) or ".." in host:
        raise InvalidFormatError("Invalid URL format")
    return host


def domain_variants(domain: str) -> List[str]:
    variants = {domain}
    for prefix in VARIANT_PREFIXES:
        variants.add(prefix + domain)
    return sorted(variants)
