# Author: Green Mountain Systems AI Inc.
# Donated to IAB Tech Lab

"""Analysis output models.

An analysis produces exactly one AnalysisResult holding the derived
summary, the ordered issue list and the located bid request.
"""

from enum import Enum
from typing import Any, Optional

from pydantic import BaseModel, Field

from .validation import Issue, Severity


class RequestType(str, Enum):
    """Request classification derived from the primary media formats."""

    BANNER = "Banner"
    VIDEO = "Video"
    AUDIO = "Audio"
    NATIVE = "Native"
    MIXED = "Mixed"
    UNKNOWN = "Unknown"


class Platform(str, Enum):
    """Distribution platform of the request."""

    APP = "App"
    SITE = "Site"
    UNKNOWN = "Unknown"


class AnalysisSummary(BaseModel):
    """Human-facing classification of a bid request."""

    request_type: RequestType = RequestType.UNKNOWN
    media_formats: list[str] = Field(default_factory=list)
    impressions: int = 0
    platform: Platform = Platform.UNKNOWN
    device_type: str = "Unknown"
    geo: str = "N/A"

    # Details surfaced on the request dashboard
    is_ctv: bool = False
    timeout_ms: Optional[int] = None
    currency: Optional[str] = None
    bid_floor: Optional[str] = None
    schain_nodes: Optional[int] = None
    privacy_signals: list[str] = Field(default_factory=list)


class AnalysisResult(BaseModel):
    """Sole output of the analyzer."""

    summary: AnalysisSummary = Field(default_factory=AnalysisSummary)
    issues: list[Issue] = Field(default_factory=list)
    request: Optional[Any] = None
    error: Optional[str] = None

    def _by_severity(self, severity: Severity) -> list[Issue]:
        return [issue for issue in self.issues if issue.severity == severity]

    @property
    def errors(self) -> list[Issue]:
        return self._by_severity(Severity.ERROR)

    @property
    def warnings(self) -> list[Issue]:
        return self._by_severity(Severity.WARNING)

    @property
    def infos(self) -> list[Issue]:
        return self._by_severity(Severity.INFO)

    @property
    def is_valid(self) -> bool:
        """A single error marks the whole request as invalid."""
        return self.error is None and not self.errors

    @property
    def issue_ids(self) -> list[str]:
        """Issue ids in catalogue order."""
        return [issue.id for issue in self.issues]
