# Author: Green Mountain Systems AI Inc.
# Donated to IAB Tech Lab

"""Banner rules, applied to each impression carrying a banner object."""

from ..models.validation import InventoryType, Rule, RuleSet, Severity
from .helpers import (
    every_media,
    is_flag,
    is_int,
    is_int_list,
    is_positive_int,
    is_str_list,
    optional,
    with_inventory,
)

_has_banner = with_inventory(InventoryType.BANNER)


def _every_banner(ctx, predicate) -> bool:
    return every_media(ctx, "banner", predicate)


def _has_size(banner: dict) -> bool:
    if banner.get("w") is not None and banner.get("h") is not None:
        return True
    formats = banner.get("format")
    return isinstance(formats, list) and len(formats) > 0


def _format_entry_valid(entry) -> bool:
    if not isinstance(entry, dict):
        return False
    if entry.get("w") is not None or entry.get("h") is not None:
        return is_positive_int(entry.get("w")) and is_positive_int(entry.get("h"))
    return is_positive_int(entry.get("wratio")) and is_positive_int(entry.get("hratio"))


BANNER_RULES = RuleSet(
    name="banner",
    description="Checks on imp.banner objects.",
    rules=(
        Rule(
            id="Banner-B-001",
            description="banner has neither w/h nor a non-empty format array.",
            severity=Severity.ERROR,
            path="imp[].banner",
            spec_ref="§3.2.6",
            applies=_has_banner,
            check=lambda ctx: _every_banner(ctx, _has_size),
        ),
        Rule(
            id="Banner-B-002",
            description="banner.format entries need positive w/h or wratio/hratio.",
            severity=Severity.ERROR,
            path="imp[].banner.format",
            spec_ref="§3.2.10",
            applies=_has_banner,
            check=lambda ctx: _every_banner(
                ctx,
                lambda b: optional(
                    b.get("format"),
                    lambda f: isinstance(f, list) and all(_format_entry_valid(e) for e in f),
                ),
            ),
        ),
        Rule(
            id="Banner-B-003",
            description="banner.w and banner.h must be positive integers.",
            severity=Severity.ERROR,
            path="imp[].banner",
            spec_ref="§3.2.6",
            applies=_has_banner,
            check=lambda ctx: _every_banner(
                ctx,
                lambda b: optional(b.get("w"), is_positive_int)
                and optional(b.get("h"), is_positive_int),
            ),
        ),
        Rule(
            id="Banner-B-004",
            description="banner.pos is not a known ad position (0-7).",
            severity=Severity.WARNING,
            path="imp[].banner.pos",
            spec_ref="List 5.4",
            applies=_has_banner,
            check=lambda ctx: _every_banner(
                ctx, lambda b: optional(b.get("pos"), lambda p: is_int(p) and 0 <= p <= 7)
            ),
        ),
        Rule(
            id="Banner-B-005",
            description="banner.btype and banner.battr must be arrays of integers.",
            severity=Severity.ERROR,
            path="imp[].banner",
            spec_ref="§3.2.6",
            applies=_has_banner,
            check=lambda ctx: _every_banner(
                ctx,
                lambda b: optional(b.get("btype"), is_int_list)
                and optional(b.get("battr"), is_int_list),
            ),
        ),
        Rule(
            id="Banner-B-006",
            description="banner.mimes must be an array of strings.",
            severity=Severity.ERROR,
            path="imp[].banner.mimes",
            spec_ref="§3.2.6",
            applies=_has_banner,
            check=lambda ctx: _every_banner(ctx, lambda b: optional(b.get("mimes"), is_str_list)),
        ),
        Rule(
            id="Banner-B-007",
            description="banner.topframe must be 0 or 1.",
            severity=Severity.ERROR,
            path="imp[].banner.topframe",
            spec_ref="§3.2.6",
            applies=_has_banner,
            check=lambda ctx: _every_banner(ctx, lambda b: optional(b.get("topframe"), is_flag)),
        ),
        Rule(
            id="Banner-B-008",
            description="banner.vcm must be 0 or 1.",
            severity=Severity.ERROR,
            path="imp[].banner.vcm",
            spec_ref="§3.2.6",
            applies=_has_banner,
            check=lambda ctx: _every_banner(ctx, lambda b: optional(b.get("vcm"), is_flag)),
        ),
        Rule(
            id="Banner-B-009",
            description="banner.api must be an array of integers.",
            severity=Severity.WARNING,
            path="imp[].banner.api",
            spec_ref="List 5.6",
            applies=_has_banner,
            check=lambda ctx: _every_banner(ctx, lambda b: optional(b.get("api"), is_int_list)),
        ),
    ),
)
