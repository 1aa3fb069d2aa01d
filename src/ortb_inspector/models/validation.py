# Author: Green Mountain Systems AI Inc.
# Donated to IAB Tech Lab

"""Validation models for the OpenRTB rule engine.

These models describe the moving parts of a single analysis:
- Severity levels and inventory types
- The per-analysis validation context shared by every rule
- Declarative rule records and the named sets that group them
- Issues produced by failing rules
"""

from enum import Enum
from typing import Any, Callable, Optional

from pydantic import BaseModel, ConfigDict, Field


# =============================================================================
# Enums
# =============================================================================


class Severity(str, Enum):
    """Impact level of a failed rule."""

    ERROR = "Error"  # OpenRTB violation, request likely rejected
    WARNING = "Warning"  # Risk or best-practice deviation
    INFO = "Info"  # Observation, no negative impact


class InventoryType(str, Enum):
    """Media category detected on impressions, in detection order."""

    BANNER = "banner"
    VIDEO = "video"
    AUDIO = "audio"
    NATIVE = "native"
    DOOH = "dooh"  # Detected through imp.qty


class PartnerProfile(str, Enum):
    """Partner-specific rule profiles that can be forced on an analysis."""

    EQ = "eq"


# =============================================================================
# Context
# =============================================================================


class ValidationContext(BaseModel):
    """Facts inferred once per analysis and shared read-only by every rule."""

    model_config = ConfigDict(frozen=True)

    root: Optional[Any] = None  # Located bid request dict, never copied
    inventory_types: tuple[InventoryType, ...] = ()
    is_ctv: bool = False
    partner_profile: Optional[PartnerProfile] = None

    @property
    def has_root(self) -> bool:
        """Whether a bid request object was located."""
        return self.root is not None

    def has_inventory(self, inventory_type: InventoryType) -> bool:
        """Check if any impression carries the given inventory type."""
        return inventory_type in self.inventory_types


# =============================================================================
# Rules and issues
# =============================================================================

Predicate = Callable[[ValidationContext], bool]


class Rule(BaseModel):
    """A single declarative validation rule.

    ``check`` returns True when the request passes. ``applies`` gates the
    rule; when omitted the rule always runs.
    """

    model_config = ConfigDict(frozen=True)

    id: str
    description: str
    severity: Severity
    path: Optional[str] = None
    spec_ref: Optional[str] = None
    applies: Optional[Predicate] = None
    check: Predicate

    def is_applicable(self, context: ValidationContext) -> bool:
        """Evaluate the applicability gate."""
        if self.applies is None:
            return True
        return bool(self.applies(context))

    def passes(self, context: ValidationContext) -> bool:
        """Evaluate the rule condition."""
        return bool(self.check(context))


class RuleSet(BaseModel):
    """Named, ordered group of rules."""

    model_config = ConfigDict(frozen=True)

    name: str
    description: str = ""
    rules: tuple[Rule, ...] = Field(default_factory=tuple)

    def __len__(self) -> int:
        return len(self.rules)


class Issue(BaseModel):
    """A rule failure recorded during an analysis."""

    model_config = ConfigDict(frozen=True)

    id: str
    severity: Severity
    message: str
    path: Optional[str] = None
    spec_ref: Optional[str] = None

    @classmethod
    def from_rule(cls, rule: Rule) -> "Issue":
        """Build an issue carrying the rule's metadata."""
        return cls(
            id=rule.id,
            severity=rule.severity,
            message=rule.description,
            path=rule.path,
            spec_ref=rule.spec_ref,
        )


class IssueSink(list):
    """Mutable issue list that cross-field validators append to."""

    def add(
        self,
        issue_id: str,
        severity: Severity,
        message: str,
        path: Optional[str] = None,
        spec_ref: Optional[str] = None,
    ) -> Issue:
        """Append a new issue and return it."""
        issue = Issue(
            id=issue_id,
            severity=severity,
            message=message,
            path=path,
            spec_ref=spec_ref,
        )
        self.append(issue)
        return issue
