"""Recipient identity normalization.

Chat addresses reach us in several surface forms for the same person:

    +62 812-3456-789
    628123456789
    628123456789@c.us
    628123456789:12@s.whatsapp.net

All of them must compare equal, so every address is reduced to one canonical
key (``628123456789@s.whatsapp.net``) before it is stored or looked up.
"""

from __future__ import annotations

import re

USER_DOMAIN = "s.whatsapp.net"
INVALID_KEY = ""

# Domains that are aliases of the personal-chat domain.
_USER_DOMAIN_ALIASES = {"c.us", "whatsapp.net", USER_DOMAIN}

_SEPARATORS = re.compile(r"[\s\-.()]")
_DEVICE_SUFFIX = re.compile(r"(:\d+)+$")


def normalize(address: str | None) -> str:
    """Return the canonical recipient key for ``address``.

    Malformed input yields ``INVALID_KEY`` instead of raising, so callers can
    simply skip the message. Only personal-chat addresses are rewritten;
    other domains (groups, broadcast lists) keep their user part verbatim.

    Examples:
        >>> normalize(" +62 812-3456 ")
        '628123456@s.whatsapp.net'
        >>> normalize("628123456@c.us")
        '628123456@s.whatsapp.net'
        >>> normalize("6281234-1600000000@G.US")
        '6281234-1600000000@g.us'
        >>> normalize("not@an@address")
        ''
    """
    if not isinstance(address, str):
        return INVALID_KEY

    raw = address.strip()
    if raw.count("@") > 1:
        return INVALID_KEY

    user, at, domain = raw.partition("@")
    user = user.strip()
    domain = domain.strip().lower()
    if at and not domain:
        return INVALID_KEY

    if not domain or domain in _USER_DOMAIN_ALIASES:
        domain = USER_DOMAIN
        user = _SEPARATORS.sub("", user).lstrip("+")
        user = _DEVICE_SUFFIX.sub("", user)

    if not user:
        return INVALID_KEY

    return f"{user}@{domain}"


def is_valid(key: str) -> bool:
    return bool(key)


def delivery_address(address: str | None) -> str:
    """Address form the messaging transport expects when sending."""
    return normalize(address)


def clean_user(key: str) -> str:
    """Strip the transport domain, e.g. for webhook payloads."""
    return key.split("@", 1)[0]
