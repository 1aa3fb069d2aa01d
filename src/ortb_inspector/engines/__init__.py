# Author: Green Mountain Systems AI Inc.
# Donated to IAB Tech Lab

"""Validation engines for the OpenRTB inspector."""

from .analyzer import BidRequestAnalyzer, analyze, get_analyzer
from .context_builder import build_context
from .cross_field import CROSS_FIELD_VALIDATORS
from .request_locator import locate_request, parse_request_text, split_documents
from .rule_evaluator import RuleEvaluator
from .summary import derive_summary

__all__ = [
    "BidRequestAnalyzer",
    "analyze",
    "get_analyzer",
    "build_context",
    "CROSS_FIELD_VALIDATORS",
    "locate_request",
    "parse_request_text",
    "split_documents",
    "RuleEvaluator",
    "derive_summary",
]
