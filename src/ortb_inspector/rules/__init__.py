# Author: Green Mountain Systems AI Inc.
# Donated to IAB Tech Lab

"""OpenRTB rule catalogue.

Rule sets are evaluated in the order of ``RULE_SETS`` and, within a set,
in declaration order. The order only affects how issues are listed.
"""

from typing import Iterator, Optional

from ..models.validation import Rule, RuleSet
from .advanced import ADVANCED_RULES
from .app_site import APP_RULES, SITE_RULES
from .audio import AUDIO_RULES
from .banner import BANNER_RULES
from .core import CORE_RULES
from .ctv import CTV_RULES
from .device import DEVICE_RULES
from .dooh import DOOH_RULES
from .impression import IMPRESSION_RULES
from .native import NATIVE_RULES
from .partner import PARTNER_RULES
from .privacy import PRIVACY_RULES
from .source import SOURCE_RULES
from .video import VIDEO_RULES

RULE_SETS: tuple[RuleSet, ...] = (
    CORE_RULES,
    IMPRESSION_RULES,
    APP_RULES,
    SITE_RULES,
    DEVICE_RULES,
    VIDEO_RULES,
    AUDIO_RULES,
    NATIVE_RULES,
    BANNER_RULES,
    CTV_RULES,
    DOOH_RULES,
    PARTNER_RULES,
    PRIVACY_RULES,
    SOURCE_RULES,
    ADVANCED_RULES,
)


def iter_rules(rule_sets: tuple[RuleSet, ...] = RULE_SETS) -> Iterator[tuple[RuleSet, Rule]]:
    """Yield (rule set, rule) pairs in evaluation order."""
    for rule_set in rule_sets:
        for rule in rule_set.rules:
            yield rule_set, rule


def get_rule(rule_id: str) -> Optional[Rule]:
    """Look up a catalogue rule by id."""
    for _, rule in iter_rules():
        if rule.id == rule_id:
            return rule
    return None


def get_rule_set(name: str) -> Optional[RuleSet]:
    for rule_set in RULE_SETS:
        if rule_set.name == name:
            return rule_set
    return None


__all__ = [
    "RULE_SETS",
    "iter_rules",
    "get_rule",
    "get_rule_set",
    "CORE_RULES",
    "IMPRESSION_RULES",
    "APP_RULES",
    "SITE_RULES",
    "DEVICE_RULES",
    "VIDEO_RULES",
    "AUDIO_RULES",
    "NATIVE_RULES",
    "BANNER_RULES",
    "CTV_RULES",
    "DOOH_RULES",
    "PARTNER_RULES",
    "PRIVACY_RULES",
    "SOURCE_RULES",
    "ADVANCED_RULES",
]
