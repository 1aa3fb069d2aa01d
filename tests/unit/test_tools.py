# Author: Green Mountain Systems AI Inc.
# Donated to IAB Tech Lab

"""Unit tests for agent tools."""

import pytest

from ortb_inspector.tools import BidRequestValidationTool


class TestBidRequestValidationTool:
    """Tests for BidRequestValidationTool."""

    @pytest.fixture
    def tool(self):
        """Create the validation tool."""
        return BidRequestValidationTool()

    def test_tool_metadata(self, tool):
        """Test the tool name and argument schema."""
        assert tool.name == "bid_request_validation"
        assert "bid_request_json" in tool.args_schema.model_fields

    def test_valid_request(self, tool, site_request, to_text):
        """Test the report for a clean request."""
        report = tool._run(bid_request_json=to_text(site_request))

        assert "Bid Request Validation for req-site-001:" in report
        assert "Status: ✓ VALID" in report
        assert "- Request type: Banner" in report
        assert "All validation checks passed." in report

    def test_invalid_request(self, tool, site_request, to_text):
        """Test that errors are listed with their ids."""
        site_request["app"] = {"id": "a"}
        report = tool._run(bid_request_json=to_text(site_request))

        assert "Status: ✗ INVALID" in report
        assert "Errors:" in report
        assert "[Core-BR-006]" in report

    def test_warnings_only(self, tool):
        """Test the status for a request with warnings but no errors."""
        text = (
            '{"id":"r1","imp":[{"id":"1","banner":{"w":300,"h":250}}],'
            '"site":{"id":"s1","domain":"x.com","publisher":{"id":"p1"}}}'
        )
        report = tool._run(bid_request_json=text)

        assert "[Core-BR-010]" in report
        assert "Warnings:" in report

    def test_ctv_option(self, tool, site_request, to_text):
        """Test that force_ctv reaches the analyzer."""
        report = tool._run(bid_request_json=to_text(site_request), force_ctv=True)
        assert "[CTV-001]" in report

    def test_parse_error(self, tool):
        """Test the report for unreadable input."""
        report = tool._run(bid_request_json="{broken")

        assert "Status: ✗ INVALID" in report
        assert "Could not read the bid request" in report

    def test_unknown_partner_profile(self, tool, site_request, to_text):
        """Test that a bad partner profile is reported, not raised."""
        report = tool._run(bid_request_json=to_text(site_request), partner_profile="acme")

        assert "INVALID OPTIONS" in report
        assert "Unknown partner profile" in report
