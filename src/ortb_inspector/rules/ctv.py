# Author: Green Mountain Systems AI Inc.
# Donated to IAB Tech Lab

"""Connected TV rules.

Applied when the device type identifies a CTV or set-top box, or when CTV
validation is forced by the caller.
"""

from ..models.validation import InventoryType, Rule, RuleSet, Severity
from .helpers import (
    device_ifa,
    every_media,
    get_in,
    is_int,
    is_non_empty_str,
    when_ctv,
)

FULL_SCREEN_POS = 7  # List 5.4: Full Screen
INSTREAM_PLCMT = 1
HD_WIDTH, HD_HEIGHT = 1280, 720


def _full_screen(video: dict) -> bool:
    pos = video.get("pos")
    return is_int(pos) and pos == FULL_SCREEN_POS


def _hd_or_better(video: dict) -> bool:
    w, h = video.get("w"), video.get("h")
    if not (is_int(w) and is_int(h)):
        return True
    return w >= HD_WIDTH and h >= HD_HEIGHT


CTV_RULES = RuleSet(
    name="ctv",
    description="Stricter positional and playback checks for Connected TV.",
    rules=(
        Rule(
            id="CTV-001",
            description="CTV requests require an app object.",
            severity=Severity.ERROR,
            path="BidRequest.app",
            applies=when_ctv,
            check=lambda ctx: isinstance(get_in(ctx.root, "app"), dict),
        ),
        Rule(
            id="CTV-002",
            description="CTV video impressions must use pos 7 (full screen).",
            severity=Severity.ERROR,
            path="imp[].video.pos",
            spec_ref="List 5.4",
            applies=when_ctv,
            check=lambda ctx: every_media(ctx, "video", _full_screen),
        ),
        Rule(
            id="CTV-003",
            description="device.ifa is missing; CTV buyers target on the device advertising id.",
            severity=Severity.WARNING,
            path="BidRequest.device.ifa",
            applies=when_ctv,
            check=lambda ctx: device_ifa(ctx) is not None,
        ),
        Rule(
            id="CTV-004",
            description="device.ext.ifa_type is missing while device.ifa is present.",
            severity=Severity.WARNING,
            path="BidRequest.device.ext.ifa_type",
            spec_ref="IFA Guidelines",
            applies=when_ctv,
            check=lambda ctx: device_ifa(ctx) is None
            or is_non_empty_str(get_in(ctx.root, "device", "ext", "ifa_type")),
        ),
        Rule(
            id="CTV-005",
            description="app.bundle is missing on a CTV request.",
            severity=Severity.WARNING,
            path="BidRequest.app.bundle",
            applies=when_ctv,
            check=lambda ctx: is_non_empty_str(get_in(ctx.root, "app", "bundle")),
        ),
        Rule(
            id="CTV-006",
            description="app.storeurl is missing on a CTV request.",
            severity=Severity.WARNING,
            path="BidRequest.app.storeurl",
            applies=when_ctv,
            check=lambda ctx: is_non_empty_str(get_in(ctx.root, "app", "storeurl")),
        ),
        Rule(
            id="CTV-007",
            description="CTV video impressions are expected to be in-stream (plcmt 1).",
            severity=Severity.WARNING,
            path="imp[].video.plcmt",
            applies=when_ctv,
            check=lambda ctx: every_media(
                ctx, "video", lambda v: v.get("plcmt") is None or v.get("plcmt") == INSTREAM_PLCMT
            ),
        ),
        Rule(
            id="CTV-008",
            description="CTV video player size is below 1280x720.",
            severity=Severity.INFO,
            path="imp[].video",
            applies=when_ctv,
            check=lambda ctx: every_media(ctx, "video", _hd_or_better),
        ),
        Rule(
            id="CTV-009",
            description="device.make or device.model is missing on a CTV request.",
            severity=Severity.WARNING,
            path="BidRequest.device",
            applies=when_ctv,
            check=lambda ctx: is_non_empty_str(get_in(ctx.root, "device", "make"))
            and is_non_empty_str(get_in(ctx.root, "device", "model")),
        ),
        Rule(
            id="CTV-010",
            description="CTV request carries no video impression.",
            severity=Severity.WARNING,
            path="imp[]",
            applies=when_ctv,
            check=lambda ctx: ctx.has_inventory(InventoryType.VIDEO),
        ),
        Rule(
            id="CTV-011",
            description="app.content is missing; CTV buyers expect genre, livestream and rating signals.",
            severity=Severity.WARNING,
            path="BidRequest.app.content",
            spec_ref="§3.2.16",
            applies=when_ctv,
            check=lambda ctx: isinstance(get_in(ctx.root, "app", "content"), dict),
        ),
    ),
)
