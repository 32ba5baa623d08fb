"""Small, pure validation rules shared by the request schemas and routes.

Each rule returns a :class:`Check` instead of raising, so callers decide how a
failure is reported. Rules are looked up by name through :data:`VALIDATORS`.
"""

from __future__ import annotations

import ipaddress
import re
from collections.abc import Callable, Iterable
from dataclasses import dataclass
from urllib.parse import urlparse

INVALID_LINK = "BOOKMARKS_INVALID_LINK"
BLOCKED_DOMAIN = "BOOKMARKS_BLOCKED_DOMAIN"
INVALID_ID = "BOOKMARKS_INVALID_ID"

ALLOWED_SCHEMES = {"http", "https", "ftp"}

_GUID_RE = re.compile(
    r"^[0-9a-f]{8}-[0-9a-f]{4}-4[0-9a-f]{3}-[89ab][0-9a-f]{3}-[0-9a-f]{12}$",
    re.IGNORECASE,
)
_HOST_LABEL_RE = re.compile(r"^(?!-)[a-z0-9-]{1,63}(?<!-)$", re.IGNORECASE)
_TLD_RE = re.compile(r"^[a-z]{2,63}$", re.IGNORECASE)


@dataclass(frozen=True)
class Check:
    ok: bool
    code: str | None = None
    description: str | None = None


PASSED = Check(ok=True)


def failed(code: str, description: str) -> Check:
    return Check(ok=False, code=code, description=description)


def _is_ip_address(hostname: str) -> bool:
    try:
        ipaddress.ip_address(hostname)
    except ValueError:
        return False
    return True


def _normalize_hostname(hostname: str) -> str:
    return hostname.strip().rstrip(".").lower()


def _is_domain_name(hostname: str) -> bool:
    labels = _normalize_hostname(hostname).split(".")
    if len(labels) < 2:
        return False
    if not all(_HOST_LABEL_RE.match(label) for label in labels):
        return False
    return bool(_TLD_RE.match(labels[-1]))


def check_url(value) -> Check:
    if not isinstance(value, str) or not value.strip():
        return failed(INVALID_LINK, "Invalid link")
    if any(ch.isspace() for ch in value.strip()):
        return failed(INVALID_LINK, "Invalid link")
    try:
        parsed = urlparse(value.strip())
        hostname = parsed.hostname
        parsed.port  # raises ValueError on a malformed port
    except ValueError:
        return failed(INVALID_LINK, "Invalid link")
    if parsed.scheme.lower() not in ALLOWED_SCHEMES or not hostname:
        return failed(INVALID_LINK, "Invalid link")
    if not (_is_ip_address(hostname) or _is_domain_name(hostname)):
        return failed(INVALID_LINK, "Invalid link")
    return PASSED


def check_hostname(value: str, blocked_domains: Iterable[str] = ()) -> Check:
    hostname = _normalize_hostname(urlparse(value.strip()).hostname or "")
    blocked = {_normalize_hostname(domain) for domain in blocked_domains}
    if hostname in blocked:
        return failed(BLOCKED_DOMAIN, f"{hostname} banned")
    return PASSED


def check_link(value, blocked_domains: Iterable[str] = ()) -> Check:
    result = check_url(value)
    if not result.ok:
        return result
    return check_hostname(value, blocked_domains)


def check_guid(value) -> Check:
    if isinstance(value, str) and _GUID_RE.match(value):
        return PASSED
    return failed(INVALID_ID, "Id is invalid parameter")


VALIDATORS: dict[str, Callable[..., Check]] = {
    "url": check_url,
    "hostname": check_hostname,
    "link": check_link,
    "guid": check_guid,
}


def run_check(name: str, value, **options) -> Check:
    try:
        rule = VALIDATORS[name]
    except KeyError:
        raise LookupError(f"unknown validator: {name}") from None
    return rule(value, **options)
