# Author: Green Mountain Systems AI Inc.
# Donated to IAB Tech Lab

"""Core bid-request rules.

Structural checks on the top-level BidRequest object that apply to every
request regardless of format. ``missing-request`` is the only rule in the
catalogue that runs without a located root.
"""

from ..models.validation import Rule, RuleSet, Severity
from .helpers import (
    CURRENCY_RE,
    get_in,
    has_root,
    is_flag,
    is_int,
    is_non_empty_str,
    is_number,
    is_str_list,
    with_field,
)

_TOP_LEVEL_OBJECTS = ("site", "app", "dooh", "device", "user", "source", "regs")


def _has(ctx, key: str) -> bool:
    return get_in(ctx.root, key) is not None


def _currencies_valid(ctx) -> bool:
    cur = get_in(ctx.root, "cur")
    return is_str_list(cur, non_empty=True) and all(CURRENCY_RE.match(c) for c in cur)


def _auction_type_known(ctx) -> bool:
    at = get_in(ctx.root, "at")
    return at in (1, 2, 3) or at > 500


CORE_RULES = RuleSet(
    name="core",
    description="Structural checks on the BidRequest object.",
    rules=(
        Rule(
            id="missing-request",
            description="No object with a string id and an imp array was found.",
            severity=Severity.ERROR,
            check=lambda ctx: ctx.root is not None,
        ),
        Rule(
            id="Core-BR-001",
            description="BidRequest.id is missing or empty.",
            severity=Severity.ERROR,
            path="BidRequest.id",
            spec_ref="§3.2.1",
            applies=has_root,
            check=lambda ctx: is_non_empty_str(get_in(ctx.root, "id")),
        ),
        Rule(
            id="Core-BR-003",
            description="BidRequest.imp must be a non-empty array.",
            severity=Severity.ERROR,
            path="BidRequest.imp",
            spec_ref="§3.2.1",
            applies=has_root,
            check=lambda ctx: isinstance(get_in(ctx.root, "imp"), list)
            and len(ctx.root["imp"]) > 0,
        ),
        Rule(
            id="Core-BR-004",
            description="BidRequest.at is present but not an integer.",
            severity=Severity.ERROR,
            path="BidRequest.at",
            spec_ref="§3.2.1",
            applies=with_field("at"),
            check=lambda ctx: is_int(get_in(ctx.root, "at")),
        ),
        Rule(
            id="Core-BR-005",
            description="Neither app, site nor dooh object is present.",
            severity=Severity.ERROR,
            path="BidRequest",
            spec_ref="§3.2.1",
            applies=has_root,
            check=lambda ctx: _has(ctx, "app") or _has(ctx, "site") or _has(ctx, "dooh"),
        ),
        Rule(
            id="Core-BR-006",
            description="Both app and site objects are present; they are mutually exclusive.",
            severity=Severity.ERROR,
            path="BidRequest",
            spec_ref="§3.2.1",
            applies=has_root,
            check=lambda ctx: not (_has(ctx, "app") and _has(ctx, "site")),
        ),
        Rule(
            id="Core-BR-007",
            description="BidRequest.test must be 0 or 1.",
            severity=Severity.WARNING,
            path="BidRequest.test",
            spec_ref="§3.2.1",
            applies=with_field("test"),
            check=lambda ctx: is_flag(get_in(ctx.root, "test")),
        ),
        Rule(
            id="Core-BR-008",
            description="BidRequest.at is not 1 (first price), 2 (second price plus), 3 (fixed price) or an exchange-specific value above 500.",
            severity=Severity.WARNING,
            path="BidRequest.at",
            spec_ref="§3.2.1",
            applies=lambda ctx: is_int(get_in(ctx.root, "at")),
            check=_auction_type_known,
        ),
        Rule(
            id="Core-BR-009",
            description="BidRequest.tmax is missing or not a positive number.",
            severity=Severity.WARNING,
            path="BidRequest.tmax",
            spec_ref="§3.2.1",
            applies=has_root,
            check=lambda ctx: is_number(get_in(ctx.root, "tmax")) and ctx.root["tmax"] > 0,
        ),
        Rule(
            id="Core-BR-010",
            description="BidRequest.device is missing; most buyers will not bid without device data.",
            severity=Severity.WARNING,
            path="BidRequest.device",
            spec_ref="§3.2.18",
            applies=has_root,
            check=lambda ctx: _has(ctx, "device"),
        ),
        Rule(
            id="Core-BR-011",
            description="BidRequest.cur must be a non-empty array of ISO-4217 currency codes.",
            severity=Severity.WARNING,
            path="BidRequest.cur",
            spec_ref="§3.2.1",
            applies=with_field("cur"),
            check=_currencies_valid,
        ),
        Rule(
            id="Core-BR-012",
            description="BidRequest.tmax is above 1000 ms; most buyers time out earlier.",
            severity=Severity.INFO,
            path="BidRequest.tmax",
            applies=lambda ctx: is_number(get_in(ctx.root, "tmax")),
            check=lambda ctx: ctx.root["tmax"] <= 1000,
        ),
        Rule(
            id="Core-BR-013",
            description="BidRequest.bcat must be an array of strings.",
            severity=Severity.ERROR,
            path="BidRequest.bcat",
            spec_ref="§3.2.1",
            applies=with_field("bcat"),
            check=lambda ctx: is_str_list(get_in(ctx.root, "bcat")),
        ),
        Rule(
            id="Core-BR-014",
            description="BidRequest.badv must be an array of strings.",
            severity=Severity.ERROR,
            path="BidRequest.badv",
            spec_ref="§3.2.1",
            applies=with_field("badv"),
            check=lambda ctx: is_str_list(get_in(ctx.root, "badv")),
        ),
        Rule(
            id="Core-BR-015",
            description="Only one of wseat and bseat should be present.",
            severity=Severity.WARNING,
            path="BidRequest.wseat",
            spec_ref="§3.2.1",
            applies=has_root,
            check=lambda ctx: not (_has(ctx, "wseat") and _has(ctx, "bseat")),
        ),
        Rule(
            id="Core-BR-016",
            description="BidRequest.allimps must be 0 or 1.",
            severity=Severity.ERROR,
            path="BidRequest.allimps",
            spec_ref="§3.2.1",
            applies=with_field("allimps"),
            check=lambda ctx: is_flag(get_in(ctx.root, "allimps")),
        ),
        Rule(
            id="Core-BR-017",
            description="Top-level site, app, dooh, device, user, source and regs must be objects when present.",
            severity=Severity.ERROR,
            path="BidRequest",
            spec_ref="§3.2.1",
            applies=has_root,
            check=lambda ctx: all(
                isinstance(ctx.root[key], dict)
                for key in _TOP_LEVEL_OBJECTS
                if ctx.root.get(key) is not None
            ),
        ),
    ),
)
