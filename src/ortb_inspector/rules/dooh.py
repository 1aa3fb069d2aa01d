# Author: Green Mountain Systems AI Inc.
# Donated to IAB Tech Lab

"""Digital out-of-home rules, applied when any impression carries qty."""

from ..models.validation import InventoryType, Rule, RuleSet, Severity
from .helpers import (
    as_dict,
    every_imp,
    get_in,
    is_int,
    is_non_empty_str,
    is_number,
    is_str_list,
    optional,
    with_inventory,
)

_has_dooh = with_inventory(InventoryType.DOOH)
MEASUREMENT_VENDOR = 1  # qty.sourcetype: measurement vendor provided


def _every_qty(ctx, predicate) -> bool:
    return every_imp(ctx, lambda imp: imp.get("qty") is None or predicate(as_dict(imp["qty"])))


DOOH_RULES = RuleSet(
    name="dooh",
    description="Checks on DOOH impression multipliers and the DOOH object.",
    rules=(
        Rule(
            id="DOOH-001",
            description="imp.qty.multiplier must be a positive number.",
            severity=Severity.ERROR,
            path="imp[].qty.multiplier",
            spec_ref="§3.2.31",
            applies=_has_dooh,
            check=lambda ctx: _every_qty(
                ctx, lambda q: is_number(q.get("multiplier")) and q["multiplier"] > 0
            ),
        ),
        Rule(
            id="DOOH-002",
            description="imp.qty.sourcetype is not a known source type (0-2).",
            severity=Severity.ERROR,
            path="imp[].qty.sourcetype",
            spec_ref="List: DOOH Multiplier Measurement Source Types",
            applies=_has_dooh,
            check=lambda ctx: _every_qty(
                ctx,
                lambda q: optional(q.get("sourcetype"), lambda s: is_int(s) and 0 <= s <= 2),
            ),
        ),
        Rule(
            id="DOOH-003",
            description="imp.qty.vendor is required when sourcetype is 1 (measurement vendor).",
            severity=Severity.WARNING,
            path="imp[].qty.vendor",
            spec_ref="§3.2.31",
            applies=_has_dooh,
            check=lambda ctx: _every_qty(
                ctx,
                lambda q: q.get("sourcetype") != MEASUREMENT_VENDOR
                or is_non_empty_str(q.get("vendor")),
            ),
        ),
        Rule(
            id="DOOH-004",
            description="DOOH request has no dooh object.",
            severity=Severity.WARNING,
            path="BidRequest.dooh",
            spec_ref="§3.2.32",
            applies=_has_dooh,
            check=lambda ctx: isinstance(get_in(ctx.root, "dooh"), dict),
        ),
        Rule(
            id="DOOH-005",
            description="imp.dt must be a timestamp in milliseconds.",
            severity=Severity.ERROR,
            path="imp[].dt",
            spec_ref="§3.2.4",
            applies=_has_dooh,
            check=lambda ctx: every_imp(
                ctx, lambda imp: optional(imp.get("dt"), lambda v: is_number(v) and v > 0)
            ),
        ),
        Rule(
            id="DOOH-006",
            description="dooh.venuetype must be a non-empty array of strings.",
            severity=Severity.WARNING,
            path="BidRequest.dooh.venuetype",
            spec_ref="§3.2.32",
            applies=_has_dooh,
            check=lambda ctx: optional(
                get_in(ctx.root, "dooh", "venuetype"),
                lambda v: is_str_list(v, non_empty=True),
            ),
        ),
    ),
)
