# Author: Green Mountain Systems AI Inc.
# Donated to IAB Tech Lab

"""Impression-level rules.

Each rule is applied to every object in ``imp``. A single violating
impression fails the rule for the whole request; paths use the generic
``imp[]`` wildcard.
"""

from ..models.validation import Rule, RuleSet, Severity
from .helpers import (
    CURRENCY_RE,
    MEDIA_KEYS,
    as_list,
    every_imp,
    get_in,
    has_root,
    impressions,
    in_range,
    is_flag,
    is_int,
    is_non_empty_str,
    is_number,
    optional,
)


def _unique_non_empty_ids(ctx) -> bool:
    ids = [imp.get("id") for imp in impressions(ctx)]
    if not all(is_non_empty_str(imp_id) for imp_id in ids):
        return False
    return len(set(ids)) == len(ids)


def _media_count(imp: dict) -> int:
    return sum(1 for key in MEDIA_KEYS if imp.get(key) is not None)


def _deals_valid(imp: dict) -> bool:
    pmp = imp.get("pmp")
    if pmp is None:
        return True
    if not isinstance(pmp, dict):
        return False
    deals = pmp.get("deals")
    if deals is None:
        return True
    if not isinstance(deals, list):
        return False
    return all(isinstance(deal, dict) and is_non_empty_str(deal.get("id")) for deal in deals)


def _metrics_valid(imp: dict) -> bool:
    metrics = imp.get("metric")
    if metrics is None:
        return True
    if not isinstance(metrics, list):
        return False
    return all(
        isinstance(metric, dict)
        and is_non_empty_str(metric.get("type"))
        and in_range(metric.get("value"), 0.0, 1.0)
        for metric in metrics
    )


IMPRESSION_RULES = RuleSet(
    name="impression",
    description="Checks applied to each object in the imp array.",
    rules=(
        Rule(
            id="Core-Imp-007",
            description="Every imp entry must be an object.",
            severity=Severity.ERROR,
            path="imp[]",
            spec_ref="§3.2.4",
            applies=has_root,
            check=lambda ctx: all(
                isinstance(imp, dict) for imp in as_list(get_in(ctx.root, "imp"))
            ),
        ),
        Rule(
            id="Core-Imp-001",
            description="Impression id is missing, empty or duplicated.",
            severity=Severity.ERROR,
            path="imp[].id",
            spec_ref="§3.2.4",
            applies=has_root,
            check=_unique_non_empty_ids,
        ),
        Rule(
            id="Core-Imp-002",
            description="Impression has no video, banner, native or audio object.",
            severity=Severity.ERROR,
            path="imp[]",
            spec_ref="§3.2.4",
            applies=has_root,
            check=lambda ctx: every_imp(ctx, lambda imp: _media_count(imp) >= 1),
        ),
        Rule(
            id="Core-Imp-003",
            description="Impression carries more than one media object.",
            severity=Severity.ERROR,
            path="imp[]",
            spec_ref="§3.2.4",
            applies=has_root,
            check=lambda ctx: every_imp(ctx, lambda imp: _media_count(imp) <= 1),
        ),
        Rule(
            id="Core-Imp-004",
            description="imp.bidfloor is negative or not a number.",
            severity=Severity.WARNING,
            path="imp[].bidfloor",
            spec_ref="§3.2.4",
            applies=has_root,
            check=lambda ctx: every_imp(
                ctx,
                lambda imp: optional(
                    imp.get("bidfloor"), lambda v: is_number(v) and v >= 0
                ),
            ),
        ),
        Rule(
            id="Core-Imp-005",
            description="imp.bidfloor is set but imp.bidfloorcur is missing.",
            severity=Severity.ERROR,
            path="imp[].bidfloorcur",
            spec_ref="§3.2.4",
            applies=has_root,
            check=lambda ctx: every_imp(
                ctx,
                lambda imp: imp.get("bidfloor") is None
                or is_non_empty_str(imp.get("bidfloorcur")),
            ),
        ),
        Rule(
            id="Core-Imp-006",
            description="imp.secure must be 0 or 1.",
            severity=Severity.ERROR,
            path="imp[].secure",
            spec_ref="§3.2.4",
            applies=has_root,
            check=lambda ctx: every_imp(ctx, lambda imp: optional(imp.get("secure"), is_flag)),
        ),
        Rule(
            id="Core-Imp-008",
            description="imp.bidfloorcur is not an ISO-4217 currency code.",
            severity=Severity.WARNING,
            path="imp[].bidfloorcur",
            spec_ref="§3.2.4",
            applies=has_root,
            check=lambda ctx: every_imp(
                ctx,
                lambda imp: optional(
                    imp.get("bidfloorcur"),
                    lambda v: isinstance(v, str) and CURRENCY_RE.match(v) is not None,
                ),
            ),
        ),
        Rule(
            id="Core-Imp-009",
            description="imp.instl must be 0 or 1.",
            severity=Severity.ERROR,
            path="imp[].instl",
            spec_ref="§3.2.4",
            applies=has_root,
            check=lambda ctx: every_imp(ctx, lambda imp: optional(imp.get("instl"), is_flag)),
        ),
        Rule(
            id="Core-Imp-010",
            description="imp.exp must be a non-negative integer.",
            severity=Severity.WARNING,
            path="imp[].exp",
            spec_ref="§3.2.4",
            applies=has_root,
            check=lambda ctx: every_imp(
                ctx, lambda imp: optional(imp.get("exp"), lambda v: is_int(v) and v >= 0)
            ),
        ),
        Rule(
            id="Core-Imp-011",
            description="imp.pmp.deals must be an array of objects each carrying an id.",
            severity=Severity.ERROR,
            path="imp[].pmp.deals",
            spec_ref="§3.2.11",
            applies=has_root,
            check=lambda ctx: every_imp(ctx, _deals_valid),
        ),
        Rule(
            id="Core-Imp-012",
            description="imp.pmp.private_auction must be 0 or 1.",
            severity=Severity.WARNING,
            path="imp[].pmp.private_auction",
            spec_ref="§3.2.11",
            applies=has_root,
            check=lambda ctx: every_imp(
                ctx, lambda imp: optional(get_in(imp, "pmp", "private_auction"), is_flag)
            ),
        ),
        Rule(
            id="Core-Imp-013",
            description="imp.tagid is missing; buyers use it to identify placements.",
            severity=Severity.INFO,
            path="imp[].tagid",
            spec_ref="§3.2.4",
            applies=has_root,
            check=lambda ctx: every_imp(ctx, lambda imp: is_non_empty_str(imp.get("tagid"))),
        ),
        Rule(
            id="Core-Imp-014",
            description="imp.rwdd must be 0 or 1.",
            severity=Severity.ERROR,
            path="imp[].rwdd",
            spec_ref="§3.2.4",
            applies=has_root,
            check=lambda ctx: every_imp(ctx, lambda imp: optional(imp.get("rwdd"), is_flag)),
        ),
        Rule(
            id="Core-Imp-015",
            description="imp.metric entries need a type and a value between 0.0 and 1.0.",
            severity=Severity.ERROR,
            path="imp[].metric",
            spec_ref="§3.2.5",
            applies=has_root,
            check=lambda ctx: every_imp(ctx, _metrics_valid),
        ),
    ),
)
