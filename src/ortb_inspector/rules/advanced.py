# Author: Green Mountain Systems AI Inc.
# Donated to IAB Tech Lab

"""Advanced rules: user identity, extended ids and request-wide checks."""

from datetime import datetime, timezone

from ..models.validation import Rule, RuleSet, Severity
from .helpers import (
    as_list,
    get_in,
    has_macro,
    has_root,
    impressions,
    is_int,
    is_non_empty_str,
    iter_strings,
    with_field,
    with_object,
)

GENDERS = ("M", "F", "O")


def _eid_valid(eid) -> bool:
    if not isinstance(eid, dict) or not is_non_empty_str(eid.get("source")):
        return False
    uids = eid.get("uids")
    return (
        isinstance(uids, list)
        and len(uids) > 0
        and all(isinstance(uid, dict) and is_non_empty_str(uid.get("id")) for uid in uids)
    )


def _eids(ctx) -> list:
    eids = get_in(ctx.root, "user", "eids")
    if eids is None:
        eids = get_in(ctx.root, "user", "ext", "eids")
    return eids


def _data_valid(entry) -> bool:
    if not isinstance(entry, dict):
        return False
    segments = entry.get("segment")
    return segments is None or (
        isinstance(segments, list) and all(isinstance(s, dict) for s in segments)
    )


def _yob_plausible(ctx) -> bool:
    yob = get_in(ctx.root, "user", "yob")
    return is_int(yob) and 1900 <= yob <= datetime.now(timezone.utc).year


def _deal_ids_unique(ctx) -> bool:
    seen = set()
    for imp in impressions(ctx):
        for deal in as_list(get_in(imp, "pmp", "deals")):
            deal_id = deal.get("id") if isinstance(deal, dict) else None
            if not isinstance(deal_id, str):
                continue
            if deal_id in seen:
                return False
            seen.add(deal_id)
    return True


def _floor_currencies_declared(ctx) -> bool:
    declared = get_in(ctx.root, "cur")
    if not isinstance(declared, list) or not declared:
        return True
    return all(
        imp["bidfloorcur"] in declared
        for imp in impressions(ctx)
        if isinstance(imp.get("bidfloorcur"), str)
    )


ADVANCED_RULES = RuleSet(
    name="advanced",
    description="User identity and request-wide consistency checks.",
    rules=(
        Rule(
            id="Adv-U-001",
            description="Neither user.id nor user.buyeruid is present; audience targeting will be limited.",
            severity=Severity.INFO,
            path="BidRequest.user",
            spec_ref="§3.2.20",
            applies=with_object("user"),
            check=lambda ctx: is_non_empty_str(get_in(ctx.root, "user", "id"))
            or is_non_empty_str(get_in(ctx.root, "user", "buyeruid")),
        ),
        Rule(
            id="Adv-U-002",
            description="user.yob is not a plausible four-digit birth year.",
            severity=Severity.ERROR,
            path="BidRequest.user.yob",
            spec_ref="§3.2.20",
            applies=with_field("user", "yob"),
            check=_yob_plausible,
        ),
        Rule(
            id="Adv-U-003",
            description="user.gender must be M, F or O.",
            severity=Severity.ERROR,
            path="BidRequest.user.gender",
            spec_ref="§3.2.20",
            applies=with_field("user", "gender"),
            check=lambda ctx: get_in(ctx.root, "user", "gender") in GENDERS,
        ),
        Rule(
            id="Adv-U-004",
            description="Every extended id (eids) needs a source and non-empty uids with ids.",
            severity=Severity.ERROR,
            path="BidRequest.user.eids",
            spec_ref="§3.2.27",
            applies=lambda ctx: ctx.root is not None and _eids(ctx) is not None,
            check=lambda ctx: isinstance(_eids(ctx), list) and all(_eid_valid(e) for e in _eids(ctx)),
        ),
        Rule(
            id="Adv-U-005",
            description="user.data entries must be objects with an array of segment objects.",
            severity=Severity.ERROR,
            path="BidRequest.user.data",
            spec_ref="§3.2.21",
            applies=with_field("user", "data"),
            check=lambda ctx: isinstance(get_in(ctx.root, "user", "data"), list)
            and all(_data_valid(d) for d in ctx.root["user"]["data"]),
        ),
        Rule(
            id="Adv-X-001",
            description="An unresolved macro placeholder was found somewhere in the request.",
            severity=Severity.WARNING,
            path="BidRequest",
            applies=has_root,
            check=lambda ctx: not any(has_macro(s) for s in iter_strings(ctx.root)),
        ),
        Rule(
            id="Adv-X-002",
            description="BidRequest.test is 1; buyers will not pay for this traffic.",
            severity=Severity.INFO,
            path="BidRequest.test",
            applies=has_root,
            check=lambda ctx: get_in(ctx.root, "test") != 1,
        ),
        Rule(
            id="Adv-X-003",
            description="The same deal id is offered on more than one impression.",
            severity=Severity.WARNING,
            path="imp[].pmp.deals[].id",
            applies=has_root,
            check=_deal_ids_unique,
        ),
        Rule(
            id="Adv-X-004",
            description="An impression floor currency is not listed in BidRequest.cur.",
            severity=Severity.WARNING,
            path="imp[].bidfloorcur",
            applies=has_root,
            check=_floor_currencies_declared,
        ),
        Rule(
            id="Adv-X-005",
            description="BidRequest.ext is present but not an object.",
            severity=Severity.ERROR,
            path="BidRequest.ext",
            applies=with_field("ext"),
            check=lambda ctx: isinstance(get_in(ctx.root, "ext"), dict),
        ),
    ),
)
