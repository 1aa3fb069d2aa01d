# Author: Green Mountain Systems AI Inc.
# Donated to IAB Tech Lab

"""Unit tests for the bid request analyzer."""

import json

import pytest

from ortb_inspector.engines.analyzer import (
    BidRequestAnalyzer,
    analyze,
    coerce_partner_profile,
)
from ortb_inspector.models.analysis import Platform, RequestType
from ortb_inspector.models.validation import IssueSink, PartnerProfile, Severity


class TestScenarios:
    """End-to-end scenarios over raw text."""

    def test_site_banner_without_device(self, analyzer):
        """Test a site banner request without a device object."""
        text = (
            '{"id":"r1","imp":[{"id":"1","banner":{"w":300,"h":250}}],'
            '"site":{"id":"s1","domain":"x.com","publisher":{"id":"p1"}}}'
        )
        result = analyzer.analyze(text)

        assert result.summary.platform == Platform.SITE
        assert result.summary.media_formats == ["banner"]
        assert "Core-BR-010" in [issue.id for issue in result.warnings]

    def test_app_and_site(self, analyzer, site_request, to_text):
        """Test that app plus site always yields the exclusivity error."""
        site_request["app"] = {"id": "a1", "bundle": "com.example.app"}
        result = analyzer.analyze(to_text(site_request))

        assert "Core-BR-006" in [issue.id for issue in result.errors]

    def test_empty_impressions(self, analyzer, site_request, to_text):
        """Test that an empty imp array is an error and counts zero impressions."""
        site_request["imp"] = []
        result = analyzer.analyze(to_text(site_request))

        assert "Core-BR-003" in [issue.id for issue in result.errors]
        assert result.summary.impressions == 0

    def test_duration_exclusivity(self, analyzer, ctv_request, to_text):
        """Test that min/max duration with rqddurs is an error."""
        ctv_request["imp"][0]["video"].update({"minduration": 10, "maxduration": 15, "rqddurs": [10, 20]})
        result = analyzer.analyze(to_text(ctv_request))

        assert "video-durations" in [issue.id for issue in result.errors]

    def test_not_json(self, analyzer):
        """Test that unparseable text yields a single parse error."""
        result = analyzer.analyze("not json")

        assert result.error
        assert len(result.issues) == 1
        assert result.issues[0].id == "parse-error"
        assert result.issues[0].severity == Severity.ERROR
        assert "Expecting value" in result.issues[0].message
        assert result.summary.request_type == RequestType.UNKNOWN
        assert result.request is None
        assert result.is_valid is False

    def test_clean_requests(self, analyzer, site_request, ctv_request, to_text):
        """Test that well-formed requests are valid without issues."""
        for request in (site_request, ctv_request):
            result = analyzer.analyze(to_text(request))

            assert result.issues == []
            assert result.is_valid
            assert result.request == request


class TestRobustness:
    """Tests for inputs that are not bid requests."""

    @pytest.mark.parametrize("text", ["null", "42", '"text"', "[]", "{}", '{"id": 1, "imp": []}'])
    def test_missing_request(self, analyzer, text):
        """Test that parseable input without a request yields only missing-request."""
        result = analyzer.analyze(text)

        assert result.error is None
        assert result.issue_ids == ["missing-request"]
        assert result.request is None
        assert result.summary.request_type == RequestType.UNKNOWN

    @pytest.mark.parametrize(
        "text",
        [
            "",
            "   ",
            "{malformed",
            "[1, 2",
            "\x00",
            "NaN",
            "Infinity",
            "-Infinity",
            '{"id":"r","imp":[{"id":"1","banner":{"w":300,"h":250},"bidfloor":NaN}]}',
        ],
    )
    def test_never_raises(self, analyzer, text):
        """Test that arbitrary text never raises."""
        result = analyzer.analyze(text)

        assert result.error
        assert result.issue_ids == ["parse-error"]

    def test_malformed_fields_do_not_raise(self, analyzer):
        """Test that wrongly typed fields become issues rather than exceptions."""
        text = json.dumps(
            {
                "id": "r",
                "imp": [None, 3, {"id": 5, "video": "x", "banner": [], "native": {"request": 7}}],
                "site": "s",
                "device": {"geo": "g", "ip": 42, "devicetype": "3"},
                "source": {"schain": []},
                "regs": {"gdpr": "1"},
                "user": {"eids": {}},
                "tmax": "fast",
            }
        )
        result = analyzer.analyze(text)

        assert result.error is None
        assert "Core-Imp-007" in result.issue_ids
        assert "Core-BR-017" in result.issue_ids

    def test_envelope(self, analyzer, site_request):
        """Test that a wrapped request is located and analyzed."""
        text = json.dumps({"timestamp": 1700000000, "payload": {"request": site_request}})
        result = analyzer.analyze(text)

        assert result.request == site_request
        assert result.issues == []


class TestAnalyzerOptions:
    """Tests for analysis options."""

    def test_force_ctv(self, analyzer, site_request, to_text):
        """Test that force_ctv applies CTV rules to any request."""
        result = analyzer.analyze(to_text(site_request), force_ctv=True)

        assert result.summary.is_ctv is True
        assert "CTV-001" in result.issue_ids

    def test_partner_profile(self, analyzer, site_request, to_text):
        """Test that the eq profile enables partner rules."""
        del site_request["source"]
        text = to_text(site_request)

        assert "EQ-BR-004" not in analyzer.analyze(text).issue_ids
        assert "EQ-BR-004" in analyzer.analyze(text, partner_profile="eq").issue_ids
        assert "EQ-BR-004" in analyzer.analyze(text, partner_profile=PartnerProfile.EQ).issue_ids

    def test_unknown_partner_profile(self, analyzer):
        """Test that an unknown profile is an option error."""
        with pytest.raises(ValueError, match="Unknown partner profile"):
            analyzer.analyze("{}", partner_profile="acme")

    def test_coerce_partner_profile(self):
        """Test partner profile normalisation."""
        assert coerce_partner_profile(None) is None
        assert coerce_partner_profile("") is None
        assert coerce_partner_profile(" EQ ") == PartnerProfile.EQ
        assert coerce_partner_profile("none") is None

    def test_analyzer_defaults(self, site_request, to_text):
        """Test analyzer-level option defaults."""
        analyzer = BidRequestAnalyzer(force_ctv=True, partner_profile="eq")
        del site_request["user"]
        ids = analyzer.analyze(to_text(site_request)).issue_ids

        assert "CTV-001" in ids
        assert "EQ-BR-005" in ids

    def test_default_profile_can_be_turned_off(self, site_request, to_text):
        """Test that "none" disables a default partner profile for one call."""
        analyzer = BidRequestAnalyzer(partner_profile="eq")
        del site_request["user"]
        text = to_text(site_request)

        assert "EQ-BR-005" in analyzer.analyze(text).issue_ids
        assert "EQ-BR-005" in analyzer.analyze(text, partner_profile=None).issue_ids
        assert "EQ-BR-005" not in analyzer.analyze(text, partner_profile="none").issue_ids
        assert "EQ-BR-005" not in analyzer.analyze(text, partner_profile=" None ").issue_ids


class TestEvaluationProperties:
    """Tests for determinism, exhaustiveness and memoization."""

    def test_determinism(self, analyzer, site_request, to_text):
        """Test that repeated analyses give identical results."""
        site_request["app"] = {"id": "a"}
        text = to_text(site_request)

        first = analyzer.analyze(text)
        second = analyzer.analyze(text)

        assert first is not second
        assert first.model_dump() == second.model_dump()

    def test_exhaustiveness(self, analyzer):
        """Test that every failing rule is reported, across rule sets."""
        text = json.dumps(
            {
                "id": "r",
                "imp": [{"id": "1", "video": {"mimes": [], "minduration": 10, "rqddurs": [5]}}],
                "app": {"id": "a"},
                "site": {"id": "s"},
                "device": {"devicetype": 3, "ip": "999.0.0.1"},
            }
        )
        ids = analyzer.analyze(text).issue_ids

        for expected in ("Core-BR-006", "video-mimes", "video-durations", "Device-D-003", "CTV-002"):
            assert expected in ids

    def test_issue_order_follows_catalogue(self, analyzer, site_request, to_text):
        """Test that issues are ordered by rule set, not by severity."""
        site_request["app"] = {"id": "a"}
        del site_request["source"]["schain"]
        ids = analyzer.analyze(to_text(site_request)).issue_ids

        assert ids.index("Core-BR-006") < ids.index("App-002") < ids.index("Source-S-001")

    def test_cross_field_issues_follow_rules(self, analyzer, ctv_request, to_text):
        """Test that cross-field issues are appended after the rule pass."""
        ctv_request["app"]["bundle"] = "com.other.app"
        ctv_request["ext"] = {"datacenter": "AMS"}
        result = analyzer.analyze(to_text(ctv_request))

        assert result.issue_ids[-2:] == ["EQ-App-010", "EQ-Device-024"]

    def test_input_is_not_mutated(self, analyzer, site_request, to_text):
        """Test that analysis leaves the located request unchanged."""
        text = to_text(site_request)
        result = analyzer.analyze(text)

        assert result.request == json.loads(text)

    def test_memoization_returns_same_object(self, cached_analyzer, site_request, to_text):
        """Test that a cache hit returns the identical result."""
        text = to_text(site_request)

        first = cached_analyzer.analyze(text)
        second = cached_analyzer.analyze(text)

        assert first is second
        assert len(cached_analyzer.cache) == 1

    def test_memo_key_includes_options(self, cached_analyzer, site_request, to_text):
        """Test that different options never share a cached result."""
        text = to_text(site_request)

        plain = cached_analyzer.analyze(text)
        forced = cached_analyzer.analyze(text, force_ctv=True)

        assert plain is not forced
        assert "CTV-001" not in plain.issue_ids
        assert "CTV-001" in forced.issue_ids

    def test_memo_key_is_exact_text(self, cached_analyzer, site_request, to_text):
        """Test that whitespace differences are separate cache entries."""
        text = to_text(site_request)

        first = cached_analyzer.analyze(text)
        second = cached_analyzer.analyze(text + " ")

        assert first is not second
        assert first.model_dump() == second.model_dump()

    def test_parse_errors_are_memoized(self, cached_analyzer):
        """Test that parse failures are cached like any other result."""
        assert cached_analyzer.analyze("{") is cached_analyzer.analyze("{")


class TestModuleLevelAnalyze:
    """Tests for the module-level analyze function."""

    def test_analyze(self, site_request, to_text):
        """Test the process-wide analyzer entry point."""
        result = analyze(to_text(site_request))

        assert result.summary.request_type == RequestType.BANNER
        assert result.is_valid

    def test_cross_field_validators_are_pluggable(self, site_request, to_text):
        """Test that custom cross-field validators receive the sink."""

        def flag_everything(root, issues: IssueSink) -> None:
            issues.add("custom-001", Severity.INFO, f"Saw {root['id']}")

        analyzer = BidRequestAnalyzer(cross_field_validators=[flag_everything])
        result = analyzer.analyze(to_text(site_request))

        assert result.issue_ids == ["custom-001"]
        assert result.infos[0].message == "Saw req-site-001"
