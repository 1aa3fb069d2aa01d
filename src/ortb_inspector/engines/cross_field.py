# Author: Green Mountain Systems AI Inc.
# Donated to IAB Tech Lab

"""Cross-Field Validators - Checks that need static lookup tables.

Unlike declarative rules, these validators receive the located request and
a mutable issue sink, and may append zero, one or several issues per call.
They run after the rule pass.

Validators:
- Store URL / bundle consistency (EQ-App-009, EQ-App-010)
- Country / datacenter continent consistency (EQ-Device-024)
"""

import re
from dataclasses import dataclass
from typing import Any, Callable, Optional
from urllib.parse import parse_qs, urlsplit

from ..models.validation import IssueSink, Severity
from ..rules.helpers import get_in, is_non_empty_str

CrossFieldValidator = Callable[[Any, IssueSink], None]


# =============================================================================
# Store URL / bundle
# =============================================================================


@dataclass(frozen=True)
class Storefront:
    """A known app storefront URL shape."""

    name: str
    hosts: tuple[str, ...]
    bundle_pattern: re.Pattern
    extract_id: Callable[[str, str], Optional[str]]


def _apple_id(path: str, query: str) -> Optional[str]:
    match = re.search(r"/id(\d+)", path)
    return match.group(1) if match else None


def _google_play_id(path: str, query: str) -> Optional[str]:
    if not path.startswith("/store/apps/details"):
        return None
    values = parse_qs(query).get("id")
    return values[0] if values else None


def _roku_id(path: str, query: str) -> Optional[str]:
    match = re.search(r"/details/([A-Za-z0-9]+)", path)
    return match.group(1) if match else None


STOREFRONTS: tuple[Storefront, ...] = (
    Storefront(
        name="Apple App Store",
        hosts=("apps.apple.com", "itunes.apple.com"),
        # Numeric App Store id, optionally prefixed with "id"
        bundle_pattern=re.compile(r"^(?:id)?\d+\Z"),
        extract_id=_apple_id,
    ),
    Storefront(
        name="Google Play",
        hosts=("play.google.com",),
        # Java package name
        bundle_pattern=re.compile(r"^[A-Za-z][A-Za-z0-9_]*(?:\.[A-Za-z0-9_]+)+\Z"),
        extract_id=_google_play_id,
    ),
    Storefront(
        name="Roku Channel Store",
        hosts=("channelstore.roku.com",),
        bundle_pattern=re.compile(r"^[A-Za-z0-9]+\Z"),
        extract_id=_roku_id,
    ),
)


def match_storefront(store_url: str) -> Optional[tuple[Storefront, str]]:
    """Match a store URL against the known storefront shapes.

    Args:
        store_url: Value of app.storeurl

    Returns:
        The storefront and the app id embedded in the URL, or None
    """
    try:
        parts = urlsplit(store_url.strip())
    except ValueError:
        return None

    host = (parts.hostname or "").lower()
    for storefront in STOREFRONTS:
        if host not in storefront.hosts:
            continue
        app_id = storefront.extract_id(parts.path, parts.query)
        if app_id:
            return storefront, app_id
    return None


def _normalize_bundle(storefront: Storefront, bundle: str) -> str:
    bundle = bundle.strip()
    if storefront.name == "Apple App Store" and bundle.startswith("id"):
        return bundle[2:]
    return bundle


def validate_store_url_and_bundle(root: Any, issues: IssueSink) -> None:
    """Check that app.storeurl points at the app declared in app.bundle."""
    store_url = get_in(root, "app", "storeurl")
    bundle = get_in(root, "app", "bundle")
    if not is_non_empty_str(store_url) or not is_non_empty_str(bundle):
        return

    matched = match_storefront(store_url)
    if matched is None:
        issues.add(
            "EQ-App-009",
            Severity.ERROR,
            "app.storeurl does not match a recognized app store URL format "
            "(Apple App Store, Google Play, Roku Channel Store).",
            path="BidRequest.app.storeurl",
            spec_ref="§3.2.14",
        )
        return

    storefront, app_id = matched
    if (
        not storefront.bundle_pattern.match(bundle.strip())
        or _normalize_bundle(storefront, bundle) != app_id
    ):
        issues.add(
            "EQ-App-010",
            Severity.ERROR,
            f"app.bundle '{bundle}' does not match the {storefront.name} "
            f"app id '{app_id}' in app.storeurl.",
            path="BidRequest.app.bundle",
            spec_ref="§3.2.14",
        )


# =============================================================================
# Country / datacenter
# =============================================================================

# Auction datacenter id (ext.datacenter) -> continent code
DATACENTER_CONTINENTS: dict[str, str] = {
    "NYC": "NA",
    "NY": "NA",
    "EWR": "NA",
    "IAD": "NA",
    "VA": "NA",
    "ORD": "NA",
    "CHI": "NA",
    "DFW": "NA",
    "DAL": "NA",
    "LAX": "NA",
    "SFO": "NA",
    "SJC": "NA",
    "SEA": "NA",
    "YYZ": "NA",
    "TOR": "NA",
    "MEX": "NA",
    "AMS": "EU",
    "FRA": "EU",
    "LON": "EU",
    "LHR": "EU",
    "PAR": "EU",
    "CDG": "EU",
    "DUB": "EU",
    "MAD": "EU",
    "MIL": "EU",
    "STO": "EU",
    "WAW": "EU",
    "SIN": "AS",
    "SG": "AS",
    "HKG": "AS",
    "TYO": "AS",
    "NRT": "AS",
    "HND": "AS",
    "SEL": "AS",
    "ICN": "AS",
    "BOM": "AS",
    "DEL": "AS",
    "DXB": "AS",
    "SYD": "OC",
    "MEL": "OC",
    "AKL": "OC",
    "SAO": "SA",
    "GRU": "SA",
    "BOG": "SA",
    "SCL": "SA",
    "EZE": "SA",
    "JNB": "AF",
    "CPT": "AF",
    "LOS": "AF",
    "CAI": "AF",
}

# Country (ISO 3166-1 alpha-2) -> continent code
COUNTRY_CONTINENTS: dict[str, str] = {
    # North America
    "US": "NA", "CA": "NA", "MX": "NA", "GT": "NA", "CR": "NA", "PA": "NA",
    "CU": "NA", "DO": "NA", "JM": "NA", "PR": "NA", "HN": "NA", "SV": "NA",
    # South America
    "BR": "SA", "AR": "SA", "CL": "SA", "CO": "SA", "PE": "SA", "VE": "SA",
    "EC": "SA", "UY": "SA", "PY": "SA", "BO": "SA",
    # Europe
    "GB": "EU", "IE": "EU", "FR": "EU", "DE": "EU", "NL": "EU", "BE": "EU",
    "LU": "EU", "ES": "EU", "PT": "EU", "IT": "EU", "CH": "EU", "AT": "EU",
    "DK": "EU", "SE": "EU", "NO": "EU", "FI": "EU", "IS": "EU", "PL": "EU",
    "CZ": "EU", "SK": "EU", "HU": "EU", "RO": "EU", "BG": "EU", "GR": "EU",
    "HR": "EU", "SI": "EU", "RS": "EU", "UA": "EU", "EE": "EU", "LV": "EU",
    "LT": "EU", "RU": "EU",
    # Asia
    "CN": "AS", "JP": "AS", "KR": "AS", "IN": "AS", "SG": "AS", "HK": "AS",
    "TW": "AS", "TH": "AS", "VN": "AS", "MY": "AS", "ID": "AS", "PH": "AS",
    "PK": "AS", "BD": "AS", "AE": "AS", "SA": "AS", "IL": "AS", "TR": "AS",
    "QA": "AS", "KW": "AS",
    # Oceania
    "AU": "OC", "NZ": "OC", "FJ": "OC", "PG": "OC",
    # Africa
    "ZA": "AF", "NG": "AF", "EG": "AF", "KE": "AF", "MA": "AF", "GH": "AF",
    "TZ": "AF", "ET": "AF", "DZ": "AF", "TN": "AF",
}

# ISO 3166-1 alpha-3 -> alpha-2 for the countries above
ALPHA3_TO_ALPHA2: dict[str, str] = {
    "USA": "US", "CAN": "CA", "MEX": "MX", "GTM": "GT", "CRI": "CR", "PAN": "PA",
    "CUB": "CU", "DOM": "DO", "JAM": "JM", "PRI": "PR", "HND": "HN", "SLV": "SV",
    "BRA": "BR", "ARG": "AR", "CHL": "CL", "COL": "CO", "PER": "PE", "VEN": "VE",
    "ECU": "EC", "URY": "UY", "PRY": "PY", "BOL": "BO",
    "GBR": "GB", "IRL": "IE", "FRA": "FR", "DEU": "DE", "NLD": "NL", "BEL": "BE",
    "LUX": "LU", "ESP": "ES", "PRT": "PT", "ITA": "IT", "CHE": "CH", "AUT": "AT",
    "DNK": "DK", "SWE": "SE", "NOR": "NO", "FIN": "FI", "ISL": "IS", "POL": "PL",
    "CZE": "CZ", "SVK": "SK", "HUN": "HU", "ROU": "RO", "BGR": "BG", "GRC": "GR",
    "HRV": "HR", "SVN": "SI", "SRB": "RS", "UKR": "UA", "EST": "EE", "LVA": "LV",
    "LTU": "LT", "RUS": "RU",
    "CHN": "CN", "JPN": "JP", "KOR": "KR", "IND": "IN", "SGP": "SG", "HKG": "HK",
    "TWN": "TW", "THA": "TH", "VNM": "VN", "MYS": "MY", "IDN": "ID", "PHL": "PH",
    "PAK": "PK", "BGD": "BD", "ARE": "AE", "SAU": "SA", "ISR": "IL", "TUR": "TR",
    "QAT": "QA", "KWT": "KW",
    "AUS": "AU", "NZL": "NZ", "FJI": "FJ", "PNG": "PG",
    "ZAF": "ZA", "NGA": "NG", "EGY": "EG", "KEN": "KE", "MAR": "MA", "GHA": "GH",
    "TZA": "TZ", "ETH": "ET", "DZA": "DZ", "TUN": "TN",
}


def country_continent(country: Any) -> Optional[str]:
    """Look up the continent of an alpha-2 or alpha-3 country code."""
    if not isinstance(country, str):
        return None
    code = country.strip().upper()
    if len(code) == 3:
        code = ALPHA3_TO_ALPHA2.get(code, "")
    return COUNTRY_CONTINENTS.get(code)


def datacenter_continent(datacenter: Any) -> Optional[str]:
    """Look up the continent of an auction datacenter id.

    Ids such as ``"ams-1"`` or ``"NYC2"`` resolve on their leading letters.
    """
    if not isinstance(datacenter, str):
        return None
    code = datacenter.strip().upper()
    if code in DATACENTER_CONTINENTS:
        return DATACENTER_CONTINENTS[code]
    match = re.match(r"[A-Z]+", code)
    return DATACENTER_CONTINENTS.get(match.group(0)) if match else None


def validate_country_datacenter_match(root: Any, issues: IssueSink) -> None:
    """Warn when the user's country and the auction datacenter sit on different continents."""
    country = get_in(root, "device", "geo", "country")
    datacenter = get_in(root, "ext", "datacenter")

    country_cont = country_continent(country)
    datacenter_cont = datacenter_continent(datacenter)
    if country_cont is None or datacenter_cont is None:
        return

    if country_cont != datacenter_cont:
        issues.add(
            "EQ-Device-024",
            Severity.WARNING,
            f"device.geo.country '{country}' ({country_cont}) is on a different "
            f"continent than datacenter '{datacenter}' ({datacenter_cont}); "
            "check geo data or auction routing.",
            path="BidRequest.device.geo.country",
            spec_ref="§3.2.19",
        )


CROSS_FIELD_VALIDATORS: tuple[CrossFieldValidator, ...] = (
    validate_store_url_and_bundle,
    validate_country_datacenter_match,
)
