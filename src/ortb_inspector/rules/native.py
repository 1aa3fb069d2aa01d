# Author: Green Mountain Systems AI Inc.
# Donated to IAB Tech Lab

"""Native rules.

``native.request`` is a JSON string; rules N-002 onwards only inspect
requests that parse, so an unparseable payload is reported once by
Native-N-006.
"""

import json

from ..models.validation import InventoryType, Rule, RuleSet, Severity
from .helpers import (
    as_list,
    every_media,
    native_payload,
    with_inventory,
)

_has_native = with_inventory(InventoryType.NATIVE)
_ASSET_TYPES = ("title", "img", "video", "data")


def _every_payload(ctx, predicate) -> bool:
    """Apply ``predicate`` to every parsed native request; unparsed ones pass."""

    def _check(media: dict) -> bool:
        payload = native_payload(media)
        return payload is None or predicate(payload)

    return every_media(ctx, "native", _check)


def _assets(payload: dict) -> list:
    return as_list(payload.get("assets"))


def _request_parses(media: dict) -> bool:
    request = media.get("request")
    if not isinstance(request, str):
        return True
    try:
        json.loads(request)
    except (ValueError, RecursionError):
        return False
    return True


def _asset_type_count(asset) -> int:
    if not isinstance(asset, dict):
        return 0
    return sum(1 for key in _ASSET_TYPES if asset.get(key) is not None)


def _asset_ids_unique(payload: dict) -> bool:
    ids = [a.get("id") for a in _assets(payload) if isinstance(a, dict) and "id" in a]
    return len(ids) == len(set(map(repr, ids)))


NATIVE_RULES = RuleSet(
    name="native",
    description="Checks on imp.native objects and their embedded request.",
    rules=(
        Rule(
            id="Native-N-001",
            description="native.request is missing or not a string.",
            severity=Severity.ERROR,
            path="imp[].native.request",
            spec_ref="§3.2.9",
            applies=_has_native,
            check=lambda ctx: every_media(
                ctx, "native", lambda n: isinstance(n.get("request"), str)
            ),
        ),
        Rule(
            id="Native-N-002",
            description="native request ver is missing.",
            severity=Severity.ERROR,
            path="imp[].native.request.ver",
            spec_ref="Native 1.2 §4.1",
            applies=_has_native,
            check=lambda ctx: _every_payload(ctx, lambda p: p.get("ver") is not None),
        ),
        Rule(
            id="Native-N-003",
            description="native request assets array is missing or empty.",
            severity=Severity.ERROR,
            path="imp[].native.request.assets",
            spec_ref="Native 1.2 §4.1",
            applies=_has_native,
            check=lambda ctx: _every_payload(ctx, lambda p: len(_assets(p)) > 0),
        ),
        Rule(
            id="Native-N-004",
            description="A native asset lacks an id.",
            severity=Severity.ERROR,
            path="imp[].native.request.assets[].id",
            spec_ref="Native 1.2 §4.2",
            applies=_has_native,
            check=lambda ctx: _every_payload(
                ctx,
                lambda p: all(
                    isinstance(a, dict) and a.get("id") is not None for a in _assets(p)
                ),
            ),
        ),
        Rule(
            id="Native-N-005",
            description="A native asset lacks a title, img, video or data object.",
            severity=Severity.ERROR,
            path="imp[].native.request.assets[]",
            spec_ref="Native 1.2 §4.2",
            applies=_has_native,
            check=lambda ctx: _every_payload(
                ctx, lambda p: all(_asset_type_count(a) >= 1 for a in _assets(p))
            ),
        ),
        Rule(
            id="Native-N-006",
            description="native.request string is not valid JSON.",
            severity=Severity.ERROR,
            path="imp[].native.request",
            spec_ref="§3.2.9",
            applies=_has_native,
            check=lambda ctx: every_media(ctx, "native", _request_parses),
        ),
        Rule(
            id="Native-N-007",
            description="A native asset carries more than one of title, img, video or data.",
            severity=Severity.ERROR,
            path="imp[].native.request.assets[]",
            spec_ref="Native 1.2 §4.2",
            applies=_has_native,
            check=lambda ctx: _every_payload(
                ctx, lambda p: all(_asset_type_count(a) <= 1 for a in _assets(p))
            ),
        ),
        Rule(
            id="Native-N-008",
            description="Native asset ids are not unique.",
            severity=Severity.ERROR,
            path="imp[].native.request.assets[].id",
            spec_ref="Native 1.2 §4.2",
            applies=_has_native,
            check=lambda ctx: _every_payload(ctx, _asset_ids_unique),
        ),
        Rule(
            id="Native-N-009",
            description="native request has no eventtrackers (recommended for measurement).",
            severity=Severity.INFO,
            path="imp[].native.request.eventtrackers",
            spec_ref="Native 1.2 §4.7",
            applies=_has_native,
            check=lambda ctx: _every_payload(ctx, lambda p: len(as_list(p.get("eventtrackers"))) > 0),
        ),
        Rule(
            id="Native-N-010",
            description="native.ver is present but not a string.",
            severity=Severity.WARNING,
            path="imp[].native.ver",
            spec_ref="§3.2.9",
            applies=_has_native,
            check=lambda ctx: every_media(
                ctx, "native", lambda n: n.get("ver") is None or isinstance(n.get("ver"), str)
            ),
        ),
    ),
)
