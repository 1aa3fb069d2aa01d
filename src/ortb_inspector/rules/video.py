# Author: Green Mountain Systems AI Inc.
# Donated to IAB Tech Lab

"""Video rules, applied to each impression carrying a video object."""

from ..models.validation import InventoryType, Rule, RuleSet, Severity
from .helpers import (
    every_media,
    in_range,
    is_flag,
    is_int,
    is_int_list,
    is_number,
    is_positive_int,
    is_set,
    is_str_list,
    optional,
    with_inventory,
)

_has_video = with_inventory(InventoryType.VIDEO)


def _every_video(ctx, predicate) -> bool:
    return every_media(ctx, "video", predicate)


def _non_negative_int(value) -> bool:
    return is_int(value) and value >= 0


def _durations_exclusive(video: dict) -> bool:
    has_range = "minduration" in video or "maxduration" in video
    return not (has_range and "rqddurs" in video)


def _durations_ordered(video: dict) -> bool:
    low, high = video.get("minduration"), video.get("maxduration")
    if not (is_number(low) and is_number(high)):
        return True
    return high >= low


def _skip_fields_consistent(video: dict) -> bool:
    if is_set(video.get("skip")):
        return True
    return video.get("skipmin") is None and video.get("skipafter") is None


def _bitrates_ordered(video: dict) -> bool:
    low, high = video.get("minbitrate"), video.get("maxbitrate")
    if not (is_number(low) and is_number(high)):
        return True
    return high >= low


def _companions_valid(video: dict) -> bool:
    companions = video.get("companionad")
    if companions is None:
        return True
    return isinstance(companions, list) and all(isinstance(c, dict) for c in companions)


VIDEO_RULES = RuleSet(
    name="video",
    description="Checks on imp.video objects.",
    rules=(
        Rule(
            id="video-mimes",
            description="video.mimes is missing or not a non-empty array of strings.",
            severity=Severity.ERROR,
            path="imp[].video.mimes",
            spec_ref="§3.2.7",
            applies=_has_video,
            check=lambda ctx: _every_video(
                ctx, lambda v: is_str_list(v.get("mimes"), non_empty=True)
            ),
        ),
        Rule(
            id="video-durations",
            description="video carries both minduration/maxduration and rqddurs; they are mutually exclusive.",
            severity=Severity.ERROR,
            path="imp[].video",
            spec_ref="§3.2.7",
            applies=_has_video,
            check=lambda ctx: _every_video(ctx, _durations_exclusive),
        ),
        Rule(
            id="Video-V-001",
            description="video.minduration and video.maxduration must be non-negative integers.",
            severity=Severity.ERROR,
            path="imp[].video",
            spec_ref="§3.2.7",
            applies=_has_video,
            check=lambda ctx: _every_video(
                ctx,
                lambda v: optional(v.get("minduration"), _non_negative_int)
                and optional(v.get("maxduration"), _non_negative_int),
            ),
        ),
        Rule(
            id="Video-V-002",
            description="video.maxduration is lower than video.minduration.",
            severity=Severity.ERROR,
            path="imp[].video",
            spec_ref="§3.2.7",
            applies=_has_video,
            check=lambda ctx: _every_video(ctx, _durations_ordered),
        ),
        Rule(
            id="Video-V-003",
            description="video.protocols is missing or empty (recommended).",
            severity=Severity.WARNING,
            path="imp[].video.protocols",
            spec_ref="§3.2.7",
            applies=_has_video,
            check=lambda ctx: _every_video(
                ctx, lambda v: is_int_list(v.get("protocols"), non_empty=True)
            ),
        ),
        Rule(
            id="Video-V-004",
            description="video.w and video.h must be positive integers.",
            severity=Severity.ERROR,
            path="imp[].video",
            spec_ref="§3.2.7",
            applies=_has_video,
            check=lambda ctx: _every_video(
                ctx,
                lambda v: optional(v.get("w"), is_positive_int)
                and optional(v.get("h"), is_positive_int),
            ),
        ),
        Rule(
            id="Video-V-005",
            description="video.startdelay must be an integer of -2 or greater.",
            severity=Severity.ERROR,
            path="imp[].video.startdelay",
            spec_ref="List 5.12",
            applies=_has_video,
            check=lambda ctx: _every_video(
                ctx, lambda v: optional(v.get("startdelay"), lambda d: is_int(d) and d >= -2)
            ),
        ),
        Rule(
            id="Video-V-006",
            description="video.plcmt is not a known placement subtype (1-4).",
            severity=Severity.WARNING,
            path="imp[].video.plcmt",
            spec_ref="List: Plcmt Subtypes - Video",
            applies=_has_video,
            check=lambda ctx: _every_video(
                ctx, lambda v: optional(v.get("plcmt"), lambda p: is_int(p) and 1 <= p <= 4)
            ),
        ),
        Rule(
            id="Video-V-007",
            description="video.placement is deprecated in OpenRTB 2.6; send plcmt.",
            severity=Severity.INFO,
            path="imp[].video.placement",
            spec_ref="§3.2.7",
            applies=_has_video,
            check=lambda ctx: _every_video(
                ctx, lambda v: v.get("placement") is None or v.get("plcmt") is not None
            ),
        ),
        Rule(
            id="Video-V-008",
            description="video.linearity must be 1 (linear) or 2 (non-linear).",
            severity=Severity.ERROR,
            path="imp[].video.linearity",
            spec_ref="List 5.7",
            applies=_has_video,
            check=lambda ctx: _every_video(
                ctx, lambda v: optional(v.get("linearity"), lambda x: is_int(x) and x in (1, 2))
            ),
        ),
        Rule(
            id="Video-V-009",
            description="video.skipmin or video.skipafter is set without skip=1.",
            severity=Severity.WARNING,
            path="imp[].video.skip",
            spec_ref="§3.2.7",
            applies=_has_video,
            check=lambda ctx: _every_video(ctx, _skip_fields_consistent),
        ),
        Rule(
            id="Video-V-010",
            description="video.playbackmethod must be an array of known playback methods (1-7).",
            severity=Severity.ERROR,
            path="imp[].video.playbackmethod",
            spec_ref="List 5.10",
            applies=_has_video,
            check=lambda ctx: _every_video(
                ctx,
                lambda v: optional(
                    v.get("playbackmethod"),
                    lambda m: is_int_list(m) and all(1 <= x <= 7 for x in m),
                ),
            ),
        ),
        Rule(
            id="Video-V-011",
            description="video.rqddurs must be an array of positive integers.",
            severity=Severity.ERROR,
            path="imp[].video.rqddurs",
            spec_ref="§3.2.7",
            applies=_has_video,
            check=lambda ctx: _every_video(
                ctx,
                lambda v: optional(
                    v.get("rqddurs"),
                    lambda d: is_int_list(d, non_empty=True) and all(x > 0 for x in d),
                ),
            ),
        ),
        Rule(
            id="Video-V-012",
            description="video.poddur must be a positive integer.",
            severity=Severity.ERROR,
            path="imp[].video.poddur",
            spec_ref="§3.2.7",
            applies=_has_video,
            check=lambda ctx: _every_video(ctx, lambda v: optional(v.get("poddur"), is_positive_int)),
        ),
        Rule(
            id="Video-V-013",
            description="video.slotinpod is not a known pod position (-1, 0, 1, 2).",
            severity=Severity.WARNING,
            path="imp[].video.slotinpod",
            spec_ref="List: Slot Position in Pod",
            applies=_has_video,
            check=lambda ctx: _every_video(
                ctx,
                lambda v: optional(v.get("slotinpod"), lambda s: is_int(s) and -1 <= s <= 2),
            ),
        ),
        Rule(
            id="Video-V-014",
            description="video.boxingallowed must be 0 or 1.",
            severity=Severity.ERROR,
            path="imp[].video.boxingallowed",
            spec_ref="§3.2.7",
            applies=_has_video,
            check=lambda ctx: _every_video(ctx, lambda v: optional(v.get("boxingallowed"), is_flag)),
        ),
        Rule(
            id="Video-V-015",
            description="video.maxbitrate is lower than video.minbitrate.",
            severity=Severity.WARNING,
            path="imp[].video",
            spec_ref="§3.2.7",
            applies=_has_video,
            check=lambda ctx: _every_video(ctx, _bitrates_ordered),
        ),
        Rule(
            id="Video-V-016",
            description="video.companionad must be an array of banner objects.",
            severity=Severity.ERROR,
            path="imp[].video.companionad",
            spec_ref="§3.2.7",
            applies=_has_video,
            check=lambda ctx: _every_video(ctx, _companions_valid),
        ),
        Rule(
            id="Video-V-017",
            description="video.api must be an array of integers.",
            severity=Severity.WARNING,
            path="imp[].video.api",
            spec_ref="List 5.6",
            applies=_has_video,
            check=lambda ctx: _every_video(ctx, lambda v: optional(v.get("api"), is_int_list)),
        ),
        Rule(
            id="Video-V-018",
            description="video.skip must be 0 or 1.",
            severity=Severity.ERROR,
            path="imp[].video.skip",
            spec_ref="§3.2.7",
            applies=_has_video,
            check=lambda ctx: _every_video(ctx, lambda v: optional(v.get("skip"), is_flag)),
        ),
        Rule(
            id="Video-V-019",
            description="video.minduration is above 300 seconds; check the unit.",
            severity=Severity.INFO,
            path="imp[].video.minduration",
            applies=_has_video,
            check=lambda ctx: _every_video(
                ctx, lambda v: optional(v.get("minduration"), lambda d: in_range(d, 0, 300))
            ),
        ),
    ),
)
