# Author: Green Mountain Systems AI Inc.
# Donated to IAB Tech Lab

"""Unit tests for cross-field validators."""

import pytest

from ortb_inspector.engines.cross_field import (
    country_continent,
    datacenter_continent,
    match_storefront,
    validate_country_datacenter_match,
    validate_store_url_and_bundle,
)
from ortb_inspector.models.validation import IssueSink, Severity


def app_request(storeurl, bundle) -> dict:
    return {"id": "r", "imp": [], "app": {"storeurl": storeurl, "bundle": bundle}}


def store_issues(storeurl, bundle) -> list:
    issues = IssueSink()
    validate_store_url_and_bundle(app_request(storeurl, bundle), issues)
    return issues


class TestStoreUrlAndBundle:
    """Tests for validate_store_url_and_bundle."""

    @pytest.mark.parametrize(
        "storeurl, bundle",
        [
            ("https://apps.apple.com/us/app/stream-tv/id1234567890", "1234567890"),
            ("https://apps.apple.com/us/app/stream-tv/id1234567890", "id1234567890"),
            ("https://itunes.apple.com/app/id987654321?mt=8", "987654321"),
            ("https://play.google.com/store/apps/details?id=com.example.app", "com.example.app"),
            ("https://play.google.com/store/apps/details?hl=en&id=com.example.app", "com.example.app"),
            ("https://channelstore.roku.com/details/12345/stream-tv", "12345"),
        ],
    )
    def test_matching_store_url(self, storeurl, bundle):
        """Test that a store URL embedding the declared bundle passes."""
        assert store_issues(storeurl, bundle) == []

    def test_mismatched_bundle(self):
        """Test that a different app id is an error."""
        issues = store_issues(
            "https://play.google.com/store/apps/details?id=com.example.app",
            "com.other.app",
        )

        assert [issue.id for issue in issues] == ["EQ-App-010"]
        assert issues[0].severity == Severity.ERROR
        assert "Google Play" in issues[0].message

    def test_bundle_in_wrong_format(self):
        """Test that a bundle not matching the store's format is a mismatch."""
        issues = store_issues("https://apps.apple.com/us/app/x/id1234567890", "com.example.app")
        assert [issue.id for issue in issues] == ["EQ-App-010"]

    @pytest.mark.parametrize(
        "storeurl",
        [
            "https://www.amazon.com/dp/B07XYZ1234",
            "https://play.google.com/store/search?q=stream",
            "https://apps.apple.com/us/app/stream-tv",
            "not a url",
        ],
    )
    def test_unrecognized_store_url(self, storeurl):
        """Test that unknown storefront shapes are an error."""
        issues = store_issues(storeurl, "com.example.app")

        assert [issue.id for issue in issues] == ["EQ-App-009"]
        assert issues[0].severity == Severity.ERROR

    @pytest.mark.parametrize(
        "storeurl, bundle",
        [(None, "com.example.app"), ("https://play.google.com/x", None), ("", ""), (5, "x")],
    )
    def test_skipped_without_both_fields(self, storeurl, bundle):
        """Test that the check needs both a store URL and a bundle."""
        assert store_issues(storeurl, bundle) == []

    def test_skipped_without_app(self):
        """Test that site requests and a missing root are ignored."""
        issues = IssueSink()
        validate_store_url_and_bundle({"id": "r", "imp": [], "site": {}}, issues)
        validate_store_url_and_bundle(None, issues)
        assert issues == []

    def test_match_storefront(self):
        """Test that the embedded app id is extracted."""
        storefront, app_id = match_storefront("https://channelstore.roku.com/details/abc123")

        assert storefront.name == "Roku Channel Store"
        assert app_id == "abc123"


class TestCountryDatacenterMatch:
    """Tests for validate_country_datacenter_match."""

    @staticmethod
    def _issues(country, datacenter) -> list:
        root = {"id": "r", "imp": [], "device": {"geo": {"country": country}}, "ext": {"datacenter": datacenter}}
        issues = IssueSink()
        validate_country_datacenter_match(root, issues)
        return issues

    def test_continent_mismatch_warns(self):
        """Test that a US user auctioned in Amsterdam is a warning."""
        issues = self._issues("USA", "AMS")

        assert [issue.id for issue in issues] == ["EQ-Device-024"]
        assert issues[0].severity == Severity.WARNING

    @pytest.mark.parametrize(
        "country, datacenter",
        [("USA", "NYC"), ("DEU", "fra-2"), ("GB", "LON"), ("JPN", "TYO1"), ("AUS", "syd")],
    )
    def test_same_continent(self, country, datacenter):
        """Test that matching continents pass."""
        assert self._issues(country, datacenter) == []

    @pytest.mark.parametrize(
        "country, datacenter",
        [("USA", "XYZ"), ("ZZZ", "AMS"), (None, "AMS"), ("USA", None), (840, "AMS")],
    )
    def test_unknown_values_are_skipped(self, country, datacenter):
        """Test that the warning needs both continents to be known."""
        assert self._issues(country, datacenter) == []

    def test_alpha2_and_alpha3_countries(self):
        """Test country continent lookup for both code lengths."""
        assert country_continent("BR") == "SA"
        assert country_continent("bra") == "SA"
        assert country_continent("XX") is None

    def test_datacenter_prefix(self):
        """Test that datacenter ids resolve on their leading letters."""
        assert datacenter_continent("sin-3") == "AS"
        assert datacenter_continent("SAO") == "SA"
        assert datacenter_continent("42") is None
