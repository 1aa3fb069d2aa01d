# Author: Green Mountain Systems AI Inc.
# Donated to IAB Tech Lab

"""Bid Request Validation Tool - Validate OpenRTB bid requests for agents."""

from typing import Optional, Type

from crewai.tools import BaseTool
from pydantic import BaseModel, Field

from ...engines.analyzer import analyze


class BidRequestValidationInput(BaseModel):
    """Input schema for bid request validation."""

    bid_request_json: str = Field(description="Raw OpenRTB bid request JSON (envelopes are allowed)")
    force_ctv: bool = Field(default=False, description="Apply CTV rules regardless of device type")
    partner_profile: Optional[str] = Field(
        default=None,
        description="Partner profile whose rules should apply: eq, or none to turn partner rules off",
    )


class BidRequestValidationTool(BaseTool):
    """Tool for validating OpenRTB bid requests.

    Runs the full rule catalogue and reports the request summary together
    with every issue, in catalogue order.
    """

    name: str = "bid_request_validation"
    description: str = """Validate an OpenRTB 2.x bid request.
    Returns the request classification and any errors, warnings or notes found."""
    args_schema: Type[BaseModel] = BidRequestValidationInput

    def _run(
        self,
        bid_request_json: str,
        force_ctv: bool = False,
        partner_profile: Optional[str] = None,
    ) -> str:
        """Execute bid request validation."""
        try:
            result = analyze(
                bid_request_json,
                force_ctv=force_ctv,
                partner_profile=partner_profile,
            )
        except ValueError as e:
            return f"Bid Request Validation:\nStatus: ✗ INVALID OPTIONS\n\n{e}"

        if result.error:
            return f"""
Bid Request Validation:
Status: ✗ INVALID

Could not read the bid request: {result.error}
""".strip()

        summary = result.summary
        request_id = result.request.get("id") if isinstance(result.request, dict) else "unknown"

        if result.errors:
            status = "✗ INVALID"
        elif result.warnings:
            status = "⚠ VALID WITH WARNINGS"
        else:
            status = "✓ VALID"

        lines = [
            f"Bid Request Validation for {request_id}:",
            f"Status: {status}",
            "",
            "Summary:",
            f"- Request type: {summary.request_type.value}",
            f"- Media formats: {', '.join(summary.media_formats) or 'none'}",
            f"- Impressions: {summary.impressions}",
            f"- Platform: {summary.platform.value}",
            f"- Device type: {summary.device_type}",
            f"- Geo: {summary.geo}",
        ]
        if summary.privacy_signals:
            lines.append(f"- Privacy signals: {', '.join(summary.privacy_signals)}")

        for heading, issues in (
            ("Errors", result.errors),
            ("Warnings", result.warnings),
            ("Notes", result.infos),
        ):
            if not issues:
                continue
            lines.append("")
            lines.append(f"{heading}:")
            for issue in issues:
                location = f" ({issue.path})" if issue.path else ""
                lines.append(f"  - [{issue.id}] {issue.message}{location}")

        if not result.issues:
            lines.append("")
            lines.append("All validation checks passed.")

        return "\n".join(lines)
