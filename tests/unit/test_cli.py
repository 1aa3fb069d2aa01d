# Author: Green Mountain Systems AI Inc.
# Donated to IAB Tech Lab

"""Unit tests for the command line interface."""

import json

import pytest
from typer.testing import CliRunner

from ortb_inspector.interfaces.cli.main import app

runner = CliRunner()


@pytest.fixture
def request_file(tmp_path, site_request):
    """Write a clean request to a temp file."""
    path = tmp_path / "request.json"
    path.write_text(json.dumps(site_request))
    return path


class TestAnalyzeCommand:
    """Tests for the analyze command."""

    def test_clean_request(self, request_file):
        """Test that a clean request exits successfully."""
        result = runner.invoke(app, ["analyze", str(request_file)])

        assert result.exit_code == 0
        assert "Request Summary" in result.output
        assert "No issues found" in result.output

    def test_errors_exit_non_zero(self, tmp_path, site_request):
        """Test that a request with errors exits with code 1."""
        site_request["app"] = {"id": "a"}
        path = tmp_path / "bad.json"
        path.write_text(json.dumps(site_request))

        result = runner.invoke(app, ["analyze", str(path)])

        assert result.exit_code == 1
        assert "Validation Issues" in result.output

    def test_json_output(self, request_file):
        """Test that --json prints the full result."""
        result = runner.invoke(app, ["analyze", str(request_file), "--json"])
        payload = json.loads(result.stdout)

        assert result.exit_code == 0
        assert payload["summary"]["request_type"] == "Banner"
        assert payload["issues"] == []

    def test_ctv_flag(self, request_file):
        """Test that --ctv applies CTV rules."""
        result = runner.invoke(app, ["analyze", str(request_file), "--ctv", "--json"])
        payload = json.loads(result.stdout)

        assert result.exit_code == 1
        assert "CTV-001" in [issue["id"] for issue in payload["issues"]]

    def test_missing_file(self, tmp_path):
        """Test that a missing input file exits with code 1."""
        result = runner.invoke(app, ["analyze", str(tmp_path / "nope.json")])

        assert result.exit_code == 1
        assert "File not found" in result.output

    def test_unknown_partner(self, request_file):
        """Test that an unknown partner profile is a usage error."""
        result = runner.invoke(app, ["analyze", str(request_file), "--partner", "acme"])
        assert result.exit_code == 2

    def test_request_text_is_not_markup(self, tmp_path, site_request):
        """Test that markup-like values from the request are printed literally."""
        site_request["device"]["geo"]["country"] = "[/b]"
        path = tmp_path / "markup.json"
        path.write_text(json.dumps(site_request))

        result = runner.invoke(app, ["analyze", str(path)])

        assert result.exception is None
        assert result.exit_code == 0
        assert "Geo: [/b]" in result.output

    def test_partner_none(self, request_file):
        """Test that --partner none is accepted."""
        result = runner.invoke(app, ["analyze", str(request_file), "--partner", "none"])
        assert result.exit_code == 0

    def test_parse_error(self, tmp_path):
        """Test that unparseable files are reported."""
        path = tmp_path / "broken.json"
        path.write_text("{not json")

        result = runner.invoke(app, ["analyze", str(path)])

        assert result.exit_code == 1
        assert "Parse Error" in result.output


class TestBulkCommand:
    """Tests for the bulk command."""

    def test_bulk_totals(self, tmp_path, site_request):
        """Test that each document is analyzed and totals are printed."""
        broken = dict(site_request, app={"id": "a"})
        path = tmp_path / "bulk.json"
        path.write_text(json.dumps(site_request) + "\n" + json.dumps(broken) + "\n{oops}")

        result = runner.invoke(app, ["bulk", str(path)])

        assert result.exit_code == 0
        assert "Processed 3 request(s), 2 with errors" in result.output

    def test_markup_like_request_id(self, tmp_path, site_request):
        """Test that a markup-like request id does not break the table."""
        site_request["id"] = "[/red]"
        path = tmp_path / "bulk.json"
        path.write_text(json.dumps(site_request))

        result = runner.invoke(app, ["bulk", str(path)])

        assert result.exception is None
        assert result.exit_code == 0
        assert "Processed 1 request(s), 0 with errors" in result.output

    def test_bulk_array(self, tmp_path, site_request):
        """Test that a JSON array of requests is split per element."""
        path = tmp_path / "bulk.json"
        path.write_text(json.dumps([site_request, site_request]))

        result = runner.invoke(app, ["bulk", str(path)])

        assert result.exit_code == 0
        assert "Processed 2 request(s), 0 with errors" in result.output


class TestRulesCommand:
    """Tests for the rules command."""

    def test_list_all(self):
        """Test that the catalogue is listed."""
        result = runner.invoke(app, ["rules"])

        assert result.exit_code == 0
        assert "Rule Catalogue" in result.output
        assert "set(s)" in result.output

    def test_single_set(self):
        """Test that --set filters the listing."""
        result = runner.invoke(app, ["rules", "--set", "dooh"])

        assert result.exit_code == 0
        assert "6 rule(s) in 1 set(s)" in result.output

    def test_unknown_set(self):
        """Test that an unknown rule set exits with code 1."""
        result = runner.invoke(app, ["rules", "--set", "nope"])
        assert result.exit_code == 1
