# Author: Green Mountain Systems AI Inc.
# Donated to IAB Tech Lab

"""Audio rules, applied to each impression carrying an audio object."""

from ..models.validation import InventoryType, Rule, RuleSet, Severity
from .helpers import (
    every_media,
    is_flag,
    is_int,
    is_int_list,
    is_number,
    is_str_list,
    optional,
    with_inventory,
)

_has_audio = with_inventory(InventoryType.AUDIO)


def _every_audio(ctx, predicate) -> bool:
    return every_media(ctx, "audio", predicate)


def _durations_ordered(audio: dict) -> bool:
    low, high = audio.get("minduration"), audio.get("maxduration")
    if not (is_number(low) and is_number(high)):
        return True
    return high >= low


AUDIO_RULES = RuleSet(
    name="audio",
    description="Checks on imp.audio objects.",
    rules=(
        Rule(
            id="Audio-A-001",
            description="audio.mimes is not a non-empty array of strings.",
            severity=Severity.ERROR,
            path="imp[].audio.mimes",
            spec_ref="§3.2.8",
            applies=_has_audio,
            check=lambda ctx: _every_audio(
                ctx, lambda a: is_str_list(a.get("mimes"), non_empty=True)
            ),
        ),
        Rule(
            id="Audio-A-002",
            description='audio.mimes does not include "audio/mpeg".',
            severity=Severity.WARNING,
            path="imp[].audio.mimes",
            applies=_has_audio,
            check=lambda ctx: _every_audio(
                ctx,
                lambda a: isinstance(a.get("mimes"), list) and "audio/mpeg" in a["mimes"],
            ),
        ),
        Rule(
            id="Audio-A-003",
            description="audio.protocols is missing or empty.",
            severity=Severity.ERROR,
            path="imp[].audio.protocols",
            spec_ref="§3.2.8",
            applies=_has_audio,
            check=lambda ctx: _every_audio(
                ctx, lambda a: is_int_list(a.get("protocols"), non_empty=True)
            ),
        ),
        Rule(
            id="Audio-A-004",
            description="audio.maxduration is lower than audio.minduration.",
            severity=Severity.ERROR,
            path="imp[].audio.minduration/maxduration",
            spec_ref="§3.2.8",
            applies=_has_audio,
            check=lambda ctx: _every_audio(ctx, _durations_ordered),
        ),
        Rule(
            id="Audio-A-005",
            description="audio.stitched is present but not 0 or 1.",
            severity=Severity.ERROR,
            path="imp[].audio.stitched",
            spec_ref="§3.2.8",
            applies=_has_audio,
            check=lambda ctx: _every_audio(ctx, lambda a: optional(a.get("stitched"), is_flag)),
        ),
        Rule(
            id="Audio-A-006",
            description="audio.maxseq must be a non-negative integer.",
            severity=Severity.ERROR,
            path="imp[].audio.maxseq",
            spec_ref="§3.2.8",
            applies=_has_audio,
            check=lambda ctx: _every_audio(
                ctx, lambda a: optional(a.get("maxseq"), lambda v: is_int(v) and v >= 0)
            ),
        ),
        Rule(
            id="Audio-A-007",
            description="audio.nvol is not a known volume normalization mode (0-4).",
            severity=Severity.ERROR,
            path="imp[].audio.nvol",
            spec_ref="List 5.31",
            applies=_has_audio,
            check=lambda ctx: _every_audio(
                ctx, lambda a: optional(a.get("nvol"), lambda v: is_int(v) and 0 <= v <= 4)
            ),
        ),
        Rule(
            id="Audio-A-008",
            description="audio.startdelay must be an integer of -2 or greater.",
            severity=Severity.ERROR,
            path="imp[].audio.startdelay",
            spec_ref="List 5.12",
            applies=_has_audio,
            check=lambda ctx: _every_audio(
                ctx, lambda a: optional(a.get("startdelay"), lambda d: is_int(d) and d >= -2)
            ),
        ),
    ),
)
