# Author: Green Mountain Systems AI Inc.
# Donated to IAB Tech Lab

"""Null-safe accessors, value checks and applicability predicates.

Bid requests are untyped JSON. Every accessor here returns None (or an
empty container) for absent or mistyped data so that rules never raise on
malformed content.
"""

import json
import re
from typing import Any, Callable, Iterator, Optional

from ..models.validation import InventoryType, PartnerProfile, ValidationContext

MEDIA_KEYS = ("banner", "video", "audio", "native")

IPV4_RE = re.compile(
    r"^(25[0-5]|2[0-4]\d|1\d\d|[1-9]?\d)"
    r"(\.(25[0-5]|2[0-4]\d|1\d\d|[1-9]?\d)){3}\Z"
)
_HEX_GROUP_RE = re.compile(r"^[0-9A-Fa-f]{1,4}\Z")
ALPHA3_RE = re.compile(r"^[A-Z]{3}\Z")
CURRENCY_RE = re.compile(r"^[A-Z]{3}\Z")
MACRO_RE = re.compile(r"\{[A-Za-z0-9_.:\-]+\}|\[[A-Za-z0-9_.:\-]+\]")
US_PRIVACY_RE = re.compile(r"^1[YNyn\-][YNyn\-][YNyn\-]\Z")
HTTP_URL_RE = re.compile(r"^https?://[^\s/$.?#][^\s]*\Z", re.IGNORECASE)
DOMAIN_RE = re.compile(
    r"^(?=.{1,253}\Z)([A-Za-z0-9](?:[A-Za-z0-9\-]{0,61}[A-Za-z0-9])?\.)+[A-Za-z]{2,63}\Z"
)


# =============================================================================
# Accessors
# =============================================================================


def get_in(obj: Any, *path: str) -> Any:
    """Follow dict keys, returning None at the first missing step."""
    current = obj
    for key in path:
        if not isinstance(current, dict):
            return None
        current = current.get(key)
    return current


def as_dict(value: Any) -> dict:
    return value if isinstance(value, dict) else {}


def as_list(value: Any) -> list:
    return value if isinstance(value, list) else []


def obj(ctx: ValidationContext, *path: str) -> dict:
    """Sub-object of the root at ``path``, or an empty dict."""
    return as_dict(get_in(ctx.root, *path))


def impressions(ctx: ValidationContext) -> list[dict]:
    """Impression objects of the request; non-object entries are skipped."""
    return [imp for imp in as_list(get_in(ctx.root, "imp")) if isinstance(imp, dict)]


def every_imp(ctx: ValidationContext, predicate: Callable[[dict], bool]) -> bool:
    """True when every impression satisfies the predicate."""
    return all(predicate(imp) for imp in impressions(ctx))


def media_objects(ctx: ValidationContext, key: str) -> Iterator[dict]:
    """Media sub-objects under ``key`` for impressions that carry one."""
    for imp in impressions(ctx):
        if key in imp and imp[key] is not None:
            yield as_dict(imp[key])


def every_media(ctx: ValidationContext, key: str, predicate: Callable[[dict], bool]) -> bool:
    """True when every ``key`` media object satisfies the predicate."""
    return all(predicate(media) for media in media_objects(ctx, key))


def device_ifa(ctx: ValidationContext) -> Optional[str]:
    ifa = get_in(ctx.root, "device", "ifa")
    return ifa if isinstance(ifa, str) and ifa else None


def consent_string(ctx: ValidationContext) -> Optional[str]:
    """TCF consent from user.consent (2.6) or user.ext.consent (2.5)."""
    for path in (("user", "consent"), ("user", "ext", "consent")):
        value = get_in(ctx.root, *path)
        if isinstance(value, str) and value:
            return value
    return None


def gdpr_flag(ctx: ValidationContext) -> Any:
    """GDPR flag from regs.gdpr (2.6) or regs.ext.gdpr (2.5)."""
    value = get_in(ctx.root, "regs", "gdpr")
    if value is None:
        value = get_in(ctx.root, "regs", "ext", "gdpr")
    return value


def us_privacy(ctx: ValidationContext) -> Any:
    value = get_in(ctx.root, "regs", "us_privacy")
    if value is None:
        value = get_in(ctx.root, "regs", "ext", "us_privacy")
    return value


def schain(ctx: ValidationContext) -> Optional[dict]:
    """Supply chain from source.schain (2.6) or source.ext.schain (2.5)."""
    for path in (("source", "schain"), ("source", "ext", "schain")):
        value = get_in(ctx.root, *path)
        if value is not None:
            return as_dict(value)
    return None


def native_payload(media: dict) -> Optional[dict]:
    """Parse native.request; unwraps the legacy {"native": {...}} envelope.

    Returns None when the request is missing or not valid JSON.
    """
    request = media.get("request")
    if not isinstance(request, str):
        return None
    try:
        payload = json.loads(request)
    except (ValueError, RecursionError):
        return None
    if not isinstance(payload, dict):
        return None
    if isinstance(payload.get("native"), dict):
        return payload["native"]
    return payload


def iter_strings(value: Any) -> Iterator[str]:
    """All string leaves of a JSON value, iteratively."""
    stack = [value]
    while stack:
        current = stack.pop()
        if isinstance(current, str):
            yield current
        elif isinstance(current, dict):
            stack.extend(current.values())
        elif isinstance(current, list):
            stack.extend(current)


# =============================================================================
# Value checks
# =============================================================================


def is_int(value: Any) -> bool:
    return isinstance(value, int) and not isinstance(value, bool)


def is_number(value: Any) -> bool:
    return isinstance(value, (int, float)) and not isinstance(value, bool)


def is_flag(value: Any) -> bool:
    """OpenRTB boolean integer: exactly 0 or 1."""
    return is_int(value) and value in (0, 1)


def is_set(value: Any) -> bool:
    """OpenRTB boolean integer set to 1. JSON true does not count."""
    return is_int(value) and value == 1


def is_positive_int(value: Any) -> bool:
    return is_int(value) and value > 0


def in_range(value: Any, low: float, high: float) -> bool:
    return is_number(value) and low <= value <= high


def is_non_empty_str(value: Any) -> bool:
    return isinstance(value, str) and value.strip() != ""


def is_str_list(value: Any, non_empty: bool = False) -> bool:
    if not isinstance(value, list) or (non_empty and not value):
        return False
    return all(isinstance(item, str) for item in value)


def is_int_list(value: Any, non_empty: bool = False) -> bool:
    if not isinstance(value, list) or (non_empty and not value):
        return False
    return all(is_int(item) for item in value)


def optional(value: Any, check: Callable[[Any], bool]) -> bool:
    """Absent values pass; present ones must satisfy ``check``."""
    return value is None or check(value)


def is_ipv4(value: Any) -> bool:
    return isinstance(value, str) and IPV4_RE.match(value) is not None


def is_ipv6(value: Any) -> bool:
    """1-4 hex groups separated by colons, with one optional ``::`` collapse."""
    if not isinstance(value, str) or not value or value.count("::") > 1:
        return False
    if "::" in value:
        head, tail = value.split("::")
        groups = [g for g in head.split(":") if head] + [g for g in tail.split(":") if tail]
        if len(groups) > 7:
            return False
    else:
        groups = value.split(":")
        if len(groups) != 8:
            return False
    return all(_HEX_GROUP_RE.match(group) for group in groups)


def is_private_ipv4(value: Any) -> bool:
    if not is_ipv4(value):
        return False
    first, second = (int(part) for part in value.split(".")[:2])
    return (
        first in (0, 10, 127)
        or (first == 169 and second == 254)
        or (first == 172 and 16 <= second <= 31)
        or (first == 192 and second == 168)
    )


def has_macro(value: Any) -> bool:
    """Whether a string carries an unresolved {name} or [name] placeholder."""
    return isinstance(value, str) and MACRO_RE.search(value) is not None


def is_http_url(value: Any) -> bool:
    return isinstance(value, str) and HTTP_URL_RE.match(value) is not None


def is_zero_ifa(value: Any) -> bool:
    return isinstance(value, str) and value != "" and set(value) <= {"0", "-"}


# =============================================================================
# Applicability predicates
# =============================================================================


def has_root(ctx: ValidationContext) -> bool:
    return ctx.root is not None


def with_object(*path: str) -> Callable[[ValidationContext], bool]:
    """Applies when the root carries a dict at ``path``."""

    def _applies(ctx: ValidationContext) -> bool:
        return isinstance(get_in(ctx.root, *path), dict)

    return _applies


def with_field(*path: str) -> Callable[[ValidationContext], bool]:
    """Applies when the root carries any value at ``path``."""

    def _applies(ctx: ValidationContext) -> bool:
        return get_in(ctx.root, *path) is not None

    return _applies


def with_inventory(inventory_type: InventoryType) -> Callable[[ValidationContext], bool]:
    def _applies(ctx: ValidationContext) -> bool:
        return ctx.root is not None and ctx.has_inventory(inventory_type)

    return _applies


def when_ctv(ctx: ValidationContext) -> bool:
    return ctx.root is not None and ctx.is_ctv


def with_partner(profile: PartnerProfile) -> Callable[[ValidationContext], bool]:
    def _applies(ctx: ValidationContext) -> bool:
        return ctx.root is not None and ctx.partner_profile == profile

    return _applies


def all_of(*predicates: Callable[[ValidationContext], bool]) -> Callable[[ValidationContext], bool]:
    def _applies(ctx: ValidationContext) -> bool:
        return all(predicate(ctx) for predicate in predicates)

    return _applies
