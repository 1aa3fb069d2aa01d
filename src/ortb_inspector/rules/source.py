# Author: Green Mountain Systems AI Inc.
# Donated to IAB Tech Lab

"""Source object and supply chain (schain) rules."""

from ..models.validation import Rule, RuleSet, Severity
from .helpers import (
    DOMAIN_RE,
    as_list,
    get_in,
    has_root,
    is_flag,
    is_non_empty_str,
    is_set,
    schain,
    with_field,
)


def _with_schain(ctx) -> bool:
    return ctx.root is not None and schain(ctx) is not None


def _nodes(ctx) -> list:
    return as_list((schain(ctx) or {}).get("nodes"))


def _node_valid(node) -> bool:
    return (
        isinstance(node, dict)
        and is_non_empty_str(node.get("asi"))
        and is_non_empty_str(node.get("sid"))
        and is_set(node.get("hp"))
    )


SOURCE_RULES = RuleSet(
    name="source",
    description="Checks on the Source object and the supply chain.",
    rules=(
        Rule(
            id="Source-S-001",
            description="No supply chain (source.schain or source.ext.schain) is declared.",
            severity=Severity.WARNING,
            path="BidRequest.source.schain",
            spec_ref="SupplyChain 1.0",
            applies=has_root,
            check=lambda ctx: schain(ctx) is not None,
        ),
        Rule(
            id="Source-S-002",
            description="schain.complete must be 0 or 1.",
            severity=Severity.ERROR,
            path="BidRequest.source.schain.complete",
            spec_ref="SupplyChain 1.0",
            applies=_with_schain,
            check=lambda ctx: is_flag(schain(ctx).get("complete")),
        ),
        Rule(
            id="Source-S-003",
            description="schain.ver is missing.",
            severity=Severity.ERROR,
            path="BidRequest.source.schain.ver",
            spec_ref="SupplyChain 1.0",
            applies=_with_schain,
            check=lambda ctx: is_non_empty_str(schain(ctx).get("ver")),
        ),
        Rule(
            id="Source-S-004",
            description="schain.nodes must be a non-empty array.",
            severity=Severity.ERROR,
            path="BidRequest.source.schain.nodes",
            spec_ref="SupplyChain 1.0",
            applies=_with_schain,
            check=lambda ctx: len(_nodes(ctx)) > 0,
        ),
        Rule(
            id="Source-S-005",
            description="Every schain node needs asi, sid and hp=1.",
            severity=Severity.ERROR,
            path="BidRequest.source.schain.nodes[]",
            spec_ref="SupplyChain 1.0",
            applies=_with_schain,
            check=lambda ctx: all(_node_valid(node) for node in _nodes(ctx)),
        ),
        Rule(
            id="Source-S-006",
            description="source.tid is missing (recommended for transaction tracing).",
            severity=Severity.INFO,
            path="BidRequest.source.tid",
            spec_ref="§3.2.2",
            applies=has_root,
            check=lambda ctx: is_non_empty_str(get_in(ctx.root, "source", "tid")),
        ),
        Rule(
            id="Source-S-007",
            description="source.fd must be 0 or 1.",
            severity=Severity.ERROR,
            path="BidRequest.source.fd",
            spec_ref="§3.2.2",
            applies=with_field("source", "fd"),
            check=lambda ctx: is_flag(get_in(ctx.root, "source", "fd")),
        ),
        Rule(
            id="Source-S-008",
            description="An schain node asi is not a domain name.",
            severity=Severity.WARNING,
            path="BidRequest.source.schain.nodes[].asi",
            spec_ref="SupplyChain 1.0",
            applies=_with_schain,
            check=lambda ctx: all(
                DOMAIN_RE.match(node["asi"]) is not None
                for node in _nodes(ctx)
                if isinstance(node, dict) and isinstance(node.get("asi"), str)
            ),
        ),
    ),
)
