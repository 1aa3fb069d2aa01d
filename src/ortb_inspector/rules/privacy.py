# Author: Green Mountain Systems AI Inc.
# Donated to IAB Tech Lab

"""Privacy and regulatory signal rules (COPPA, GDPR/TCF, US Privacy, GPP)."""

from ..models.validation import Rule, RuleSet, Severity
from .helpers import (
    US_PRIVACY_RE,
    consent_string,
    device_ifa,
    gdpr_flag,
    get_in,
    has_macro,
    has_root,
    is_flag,
    is_int_list,
    is_non_empty_str,
    is_set,
    is_zero_ifa,
    us_privacy,
    with_field,
)


def _gpp_sid_valid(ctx) -> bool:
    return is_int_list(get_in(ctx.root, "regs", "gpp_sid"), non_empty=True)


def _lmt_respected(ctx) -> bool:
    if get_in(ctx.root, "device", "lmt") != 1:
        return True
    ifa = device_ifa(ctx)
    return ifa is None or is_zero_ifa(ifa)


def _coppa_respected(ctx) -> bool:
    if get_in(ctx.root, "regs", "coppa") != 1:
        return True
    ifa = device_ifa(ctx)
    precise_geo = (
        get_in(ctx.root, "device", "geo", "lat") is not None
        or get_in(ctx.root, "device", "geo", "lon") is not None
    )
    return (ifa is None or is_zero_ifa(ifa)) and not precise_geo


def _dnt_respected(ctx) -> bool:
    if get_in(ctx.root, "device", "dnt") != 1:
        return True
    return get_in(ctx.root, "user", "buyeruid") is None


PRIVACY_RULES = RuleSet(
    name="privacy",
    description="Regulatory and consent signal checks.",
    rules=(
        Rule(
            id="Privacy-P-001",
            description="regs.coppa must be 0 or 1.",
            severity=Severity.ERROR,
            path="BidRequest.regs.coppa",
            spec_ref="§3.2.3",
            applies=with_field("regs", "coppa"),
            check=lambda ctx: is_flag(get_in(ctx.root, "regs", "coppa")),
        ),
        Rule(
            id="Privacy-P-002",
            description="GDPR flag (regs.gdpr or regs.ext.gdpr) must be 0 or 1.",
            severity=Severity.ERROR,
            path="BidRequest.regs.gdpr",
            spec_ref="§3.2.3",
            applies=lambda ctx: ctx.root is not None and gdpr_flag(ctx) is not None,
            check=lambda ctx: is_flag(gdpr_flag(ctx)),
        ),
        Rule(
            id="Privacy-P-003",
            description="GDPR applies but no TCF consent string is supplied.",
            severity=Severity.ERROR,
            path="BidRequest.user.consent",
            spec_ref="§3.2.20",
            applies=lambda ctx: ctx.root is not None and is_set(gdpr_flag(ctx)),
            check=lambda ctx: consent_string(ctx) is not None,
        ),
        Rule(
            id="Privacy-P-004",
            description="US Privacy string is not a valid 4-character CCPA string.",
            severity=Severity.ERROR,
            path="BidRequest.regs.us_privacy",
            spec_ref="IAB US Privacy String",
            applies=lambda ctx: ctx.root is not None and us_privacy(ctx) is not None,
            check=lambda ctx: isinstance(us_privacy(ctx), str)
            and US_PRIVACY_RE.match(us_privacy(ctx)) is not None,
        ),
        Rule(
            id="Privacy-P-005",
            description="regs.gpp is present but regs.gpp_sid is missing or not an array of integers.",
            severity=Severity.ERROR,
            path="BidRequest.regs.gpp_sid",
            spec_ref="§3.2.3",
            applies=with_field("regs", "gpp"),
            check=_gpp_sid_valid,
        ),
        Rule(
            id="Privacy-P-006",
            description="regs.gpp_sid is present without a regs.gpp string.",
            severity=Severity.WARNING,
            path="BidRequest.regs.gpp",
            spec_ref="§3.2.3",
            applies=with_field("regs", "gpp_sid"),
            check=lambda ctx: is_non_empty_str(get_in(ctx.root, "regs", "gpp")),
        ),
        Rule(
            id="Privacy-P-007",
            description="device.lmt is 1 but a non-zero device.ifa is still sent.",
            severity=Severity.WARNING,
            path="BidRequest.device.ifa",
            spec_ref="§3.2.18",
            applies=has_root,
            check=_lmt_respected,
        ),
        Rule(
            id="Privacy-P-008",
            description="regs.coppa is 1 but the device ifa or precise geo is still sent.",
            severity=Severity.WARNING,
            path="BidRequest.device",
            spec_ref="§3.2.3",
            applies=has_root,
            check=_coppa_respected,
        ),
        Rule(
            id="Privacy-P-009",
            description="device.dnt is 1 but user.buyeruid is still sent.",
            severity=Severity.WARNING,
            path="BidRequest.user.buyeruid",
            applies=has_root,
            check=_dnt_respected,
        ),
        Rule(
            id="Privacy-P-010",
            description="The TCF consent string contains an unresolved macro.",
            severity=Severity.ERROR,
            path="BidRequest.user.consent",
            applies=has_root,
            check=lambda ctx: not has_macro(consent_string(ctx)),
        ),
    ),
)
