# Author: Green Mountain Systems AI Inc.
# Donated to IAB Tech Lab

"""Partner profile rules.

Stricter requirements that only apply when the ``eq`` partner profile is
selected for the analysis. Rule ids keep their historical ``EQ-`` prefix
because they are referenced from tickets and dashboards.
"""

from ..models.validation import InventoryType, PartnerProfile, Rule, RuleSet, Severity
from .helpers import (
    all_of,
    every_imp,
    every_media,
    get_in,
    impressions,
    is_flag,
    is_int,
    is_number,
    is_str_list,
    optional,
    with_field,
    with_inventory,
    with_partner,
)

_eq = with_partner(PartnerProfile.EQ)
_eq_video = all_of(_eq, with_inventory(InventoryType.VIDEO))

MIN_DURATION_SPREAD = 30
INSTREAM_PLACEMENT = 1
AUTOPLAY_SOUND_ON = 1


def _every_video(ctx, predicate) -> bool:
    return every_media(ctx, "video", predicate)


def _has_key(key: str):
    return lambda ctx: _every_video(ctx, lambda v: v.get(key) is not None)


def _duration_spread(video: dict) -> bool:
    low, high = video.get("minduration"), video.get("maxduration")
    if not (is_number(low) and is_number(high)):
        return True
    return high - low >= MIN_DURATION_SPREAD


def _instream_autoplay_sound(video: dict) -> bool:
    if video.get("placement") != INSTREAM_PLACEMENT:
        return True
    methods = video.get("playbackmethod")
    return isinstance(methods, list) and AUTOPLAY_SOUND_ON in methods


def _single_floor_currency(ctx) -> bool:
    currencies = {
        imp["bidfloorcur"] for imp in impressions(ctx) if isinstance(imp.get("bidfloorcur"), str)
    }
    return len(currencies) <= 1


PARTNER_RULES = RuleSet(
    name="partner",
    description="Partner profile requirements (eq).",
    rules=(
        Rule(
            id="EQ-BR-002",
            description="Missing device object.",
            severity=Severity.ERROR,
            path="BidRequest.device",
            applies=_eq,
            check=lambda ctx: isinstance(get_in(ctx.root, "device"), dict),
        ),
        Rule(
            id="EQ-BR-004",
            description="Missing source object.",
            severity=Severity.ERROR,
            path="BidRequest.source",
            applies=_eq,
            check=lambda ctx: isinstance(get_in(ctx.root, "source"), dict),
        ),
        Rule(
            id="EQ-BR-005",
            description="Missing user object.",
            severity=Severity.ERROR,
            path="BidRequest.user",
            applies=_eq,
            check=lambda ctx: isinstance(get_in(ctx.root, "user"), dict),
        ),
        Rule(
            id="EQ-BR-006",
            description="ext.partnerIsCalled must be true.",
            severity=Severity.ERROR,
            path="BidRequest.ext.partnerIsCalled",
            applies=all_of(_eq, with_field("ext", "partnerIsCalled")),
            check=lambda ctx: get_in(ctx.root, "ext", "partnerIsCalled") is True,
        ),
        Rule(
            id="EQ-Imp-036",
            description="imp.secure must be 0 or 1.",
            severity=Severity.ERROR,
            path="imp[].secure",
            applies=_eq,
            check=lambda ctx: every_imp(ctx, lambda imp: optional(imp.get("secure"), is_flag)),
        ),
        Rule(
            id="EQ-Imp-048",
            description="Video impression without ext.wopv.",
            severity=Severity.WARNING,
            path="imp[].ext.wopv",
            applies=_eq_video,
            check=lambda ctx: every_imp(
                ctx,
                lambda imp: imp.get("video") is None
                or get_in(imp, "ext", "wopv") is not None,
            ),
        ),
        Rule(
            id="EQ-GOOD-002",
            description="imp.bidfloor equals 0 (possible test traffic).",
            severity=Severity.INFO,
            path="imp[].bidfloor",
            applies=_eq,
            check=lambda ctx: every_imp(
                ctx, lambda imp: not (is_number(imp.get("bidfloor")) and imp["bidfloor"] == 0)
            ),
        ),
        Rule(
            id="EQ-Imp-010",
            description="Mixed bidfloorcur across impressions.",
            severity=Severity.ERROR,
            path="imp[]",
            applies=_eq,
            check=_single_floor_currency,
        ),
        Rule(
            id="EQ-Video-037",
            description="video maxduration minus minduration is below 30 seconds.",
            severity=Severity.ERROR,
            path="imp[].video",
            applies=_eq_video,
            check=lambda ctx: _every_video(ctx, _duration_spread),
        ),
        Rule(
            id="EQ-Video-038",
            description="video.playbackmethod is missing.",
            severity=Severity.ERROR,
            path="imp[].video.playbackmethod",
            applies=_eq_video,
            check=_has_key("playbackmethod"),
        ),
        Rule(
            id="EQ-Video-039",
            description="video.placement is missing.",
            severity=Severity.ERROR,
            path="imp[].video.placement",
            applies=_eq_video,
            check=_has_key("placement"),
        ),
        Rule(
            id="EQ-Video-040",
            description="video.playbackmethod must include 1 (autoplay, sound on) when placement is 1 (in-stream).",
            severity=Severity.ERROR,
            path="imp[].video.playbackmethod",
            applies=_eq_video,
            check=lambda ctx: _every_video(ctx, _instream_autoplay_sound),
        ),
        Rule(
            id="EQ-Video-041",
            description="video.linearity is missing.",
            severity=Severity.ERROR,
            path="imp[].video.linearity",
            applies=_eq_video,
            check=_has_key("linearity"),
        ),
        Rule(
            id="EQ-Video-042",
            description="video.pos is missing.",
            severity=Severity.ERROR,
            path="imp[].video.pos",
            applies=_eq_video,
            check=_has_key("pos"),
        ),
        Rule(
            id="EQ-Video-043",
            description="video.protocols is missing.",
            severity=Severity.ERROR,
            path="imp[].video.protocols",
            applies=_eq_video,
            check=_has_key("protocols"),
        ),
        Rule(
            id="EQ-Video-044",
            description="video.mimes is not an array.",
            severity=Severity.ERROR,
            path="imp[].video.mimes",
            applies=_eq_video,
            check=lambda ctx: _every_video(ctx, lambda v: isinstance(v.get("mimes"), list)),
        ),
        Rule(
            id="EQ-Video-045",
            description='"video/mp4" is not present in video.mimes.',
            severity=Severity.WARNING,
            path="imp[].video.mimes",
            applies=_eq_video,
            check=lambda ctx: _every_video(
                ctx, lambda v: is_str_list(v.get("mimes")) and "video/mp4" in v["mimes"]
            ),
        ),
        Rule(
            id="EQ-Video-046",
            description="video.w is missing.",
            severity=Severity.ERROR,
            path="imp[].video.w",
            applies=_eq_video,
            check=_has_key("w"),
        ),
        Rule(
            id="EQ-Video-047",
            description="video.h is missing.",
            severity=Severity.ERROR,
            path="imp[].video.h",
            applies=_eq_video,
            check=_has_key("h"),
        ),
        Rule(
            id="EQ-Video-049",
            description="video.startdelay is missing (recommended).",
            severity=Severity.WARNING,
            path="imp[].video.startdelay",
            applies=_eq_video,
            check=_has_key("startdelay"),
        ),
        Rule(
            id="EQ-Video-050",
            description="video.startdelay is present but not an integer.",
            severity=Severity.ERROR,
            path="imp[].video.startdelay",
            applies=_eq_video,
            check=lambda ctx: _every_video(ctx, lambda v: optional(v.get("startdelay"), is_int)),
        ),
    ),
)
