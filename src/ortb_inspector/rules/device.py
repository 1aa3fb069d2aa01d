# Author: Green Mountain Systems AI Inc.
# Donated to IAB Tech Lab

"""Device and geo rules."""

from ..models.validation import Rule, RuleSet, Severity
from .helpers import (
    ALPHA3_RE,
    get_in,
    has_macro,
    in_range,
    is_flag,
    is_int,
    is_ipv4,
    is_ipv6,
    is_non_empty_str,
    is_positive_int,
    is_private_ipv4,
    is_set,
    is_zero_ifa,
    obj,
    optional,
    with_field,
    with_object,
)

DEVICE_TYPES = range(1, 9)  # OpenRTB 2.6 List 5.21
CONNECTION_TYPES = range(0, 8)  # List 5.22


def _device(ctx, *path: str):
    return get_in(ctx.root, "device", *path)


def _geo_coordinates_valid(ctx) -> bool:
    geo = obj(ctx, "device", "geo")
    return optional(geo.get("lat"), lambda v: in_range(v, -90, 90)) and optional(
        geo.get("lon"), lambda v: in_range(v, -180, 180)
    )


DEVICE_RULES = RuleSet(
    name="device",
    description="Checks on the Device object and its geo.",
    rules=(
        Rule(
            id="Device-D-001",
            description="device.ua is missing and no structured user agent (sua) is supplied.",
            severity=Severity.WARNING,
            path="BidRequest.device.ua",
            spec_ref="§3.2.18",
            applies=with_object("device"),
            check=lambda ctx: is_non_empty_str(_device(ctx, "ua"))
            or isinstance(_device(ctx, "sua"), dict),
        ),
        Rule(
            id="Device-D-002",
            description="Neither device.ip nor device.ipv6 is present.",
            severity=Severity.WARNING,
            path="BidRequest.device.ip",
            spec_ref="§3.2.18",
            applies=with_object("device"),
            check=lambda ctx: _device(ctx, "ip") is not None or _device(ctx, "ipv6") is not None,
        ),
        Rule(
            id="Device-D-003",
            description="device.ip is not a valid IPv4 address.",
            severity=Severity.ERROR,
            path="BidRequest.device.ip",
            spec_ref="§3.2.18",
            applies=with_field("device", "ip"),
            check=lambda ctx: is_ipv4(_device(ctx, "ip")),
        ),
        Rule(
            id="Device-D-004",
            description="device.ipv6 is not a valid IPv6 address.",
            severity=Severity.ERROR,
            path="BidRequest.device.ipv6",
            spec_ref="§3.2.18",
            applies=with_field("device", "ipv6"),
            check=lambda ctx: is_ipv6(_device(ctx, "ipv6")),
        ),
        Rule(
            id="Device-D-005",
            description="device.devicetype is not a known device type (1-8).",
            severity=Severity.ERROR,
            path="BidRequest.device.devicetype",
            spec_ref="List 5.21",
            applies=with_field("device", "devicetype"),
            check=lambda ctx: is_int(_device(ctx, "devicetype"))
            and _device(ctx, "devicetype") in DEVICE_TYPES,
        ),
        Rule(
            id="Device-D-006",
            description="device.lmt must be 0 or 1.",
            severity=Severity.ERROR,
            path="BidRequest.device.lmt",
            spec_ref="§3.2.18",
            applies=with_field("device", "lmt"),
            check=lambda ctx: is_flag(_device(ctx, "lmt")),
        ),
        Rule(
            id="Device-D-007",
            description="device.dnt must be 0 or 1.",
            severity=Severity.ERROR,
            path="BidRequest.device.dnt",
            spec_ref="§3.2.18",
            applies=with_field("device", "dnt"),
            check=lambda ctx: is_flag(_device(ctx, "dnt")),
        ),
        Rule(
            id="Device-D-008",
            description="device.ifa contains an unresolved macro.",
            severity=Severity.ERROR,
            path="BidRequest.device.ifa",
            applies=with_field("device", "ifa"),
            check=lambda ctx: not has_macro(_device(ctx, "ifa")),
        ),
        Rule(
            id="Device-D-009",
            description="device.ifa is all zeros while lmt is not set.",
            severity=Severity.INFO,
            path="BidRequest.device.ifa",
            applies=with_field("device", "ifa"),
            check=lambda ctx: not is_zero_ifa(_device(ctx, "ifa")) or is_set(_device(ctx, "lmt")),
        ),
        Rule(
            id="Device-D-010",
            description="device.geo lat/lon are outside valid coordinate ranges.",
            severity=Severity.ERROR,
            path="BidRequest.device.geo",
            spec_ref="§3.2.19",
            applies=with_object("device", "geo"),
            check=_geo_coordinates_valid,
        ),
        Rule(
            id="Device-D-011",
            description="device.geo.country is not an ISO-3166-1 alpha-3 code.",
            severity=Severity.WARNING,
            path="BidRequest.device.geo.country",
            spec_ref="§3.2.19",
            applies=with_field("device", "geo", "country"),
            check=lambda ctx: isinstance(_device(ctx, "geo", "country"), str)
            and ALPHA3_RE.match(_device(ctx, "geo", "country")) is not None,
        ),
        Rule(
            id="Device-D-012",
            description="device.connectiontype is not a known connection type (0-7).",
            severity=Severity.ERROR,
            path="BidRequest.device.connectiontype",
            spec_ref="List 5.22",
            applies=with_field("device", "connectiontype"),
            check=lambda ctx: is_int(_device(ctx, "connectiontype"))
            and _device(ctx, "connectiontype") in CONNECTION_TYPES,
        ),
        Rule(
            id="Device-D-013",
            description="device.os is missing (recommended).",
            severity=Severity.INFO,
            path="BidRequest.device.os",
            spec_ref="§3.2.18",
            applies=with_object("device"),
            check=lambda ctx: is_non_empty_str(_device(ctx, "os")),
        ),
        Rule(
            id="Device-D-014",
            description="device.js must be 0 or 1.",
            severity=Severity.ERROR,
            path="BidRequest.device.js",
            spec_ref="§3.2.18",
            applies=with_field("device", "js"),
            check=lambda ctx: is_flag(_device(ctx, "js")),
        ),
        Rule(
            id="Device-D-015",
            description="device.ua contains an unresolved macro.",
            severity=Severity.ERROR,
            path="BidRequest.device.ua",
            applies=with_field("device", "ua"),
            check=lambda ctx: not has_macro(_device(ctx, "ua")),
        ),
        Rule(
            id="Device-D-016",
            description="device.w, device.h and device.ppi must be positive integers.",
            severity=Severity.ERROR,
            path="BidRequest.device",
            spec_ref="§3.2.18",
            applies=with_object("device"),
            check=lambda ctx: all(
                optional(_device(ctx, field), is_positive_int) for field in ("w", "h", "ppi")
            ),
        ),
        Rule(
            id="Device-D-017",
            description="device.ip is in a private or reserved range.",
            severity=Severity.WARNING,
            path="BidRequest.device.ip",
            applies=with_field("device", "ip"),
            check=lambda ctx: not is_private_ipv4(_device(ctx, "ip")),
        ),
    ),
)
