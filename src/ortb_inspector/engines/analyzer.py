# Author: Green Mountain Systems AI Inc.
# Donated to IAB Tech Lab

"""Bid Request Analyzer - Single entry point of the validation engine.

Pipeline, strictly one-way:
- Parse the raw text and locate the bid request inside it
- Build the validation context (inventory types, CTV, partner profile)
- Evaluate the rule catalogue, then the cross-field validators
- Derive the summary and memoize the combined result
"""

import logging
from functools import lru_cache
from typing import Any, Iterable, Optional, Union

from ..config.settings import get_settings
from ..models.analysis import AnalysisResult, AnalysisSummary
from ..models.validation import IssueSink, PartnerProfile, RuleSet, Severity
from ..storage.base import ResultCache
from ..storage.factory import get_result_cache
from .context_builder import build_context
from .cross_field import CROSS_FIELD_VALIDATORS, CrossFieldValidator
from .request_locator import RequestParseError, locate_request, parse_request_text
from .rule_evaluator import RuleEvaluator
from .summary import derive_summary

logger = logging.getLogger(__name__)

PARSE_ERROR_ID = "parse-error"
NO_PARTNER_PROFILE = "none"  # Turns partner rules off for one call

ProfileOption = Union[PartnerProfile, str, None]


def coerce_partner_profile(value: ProfileOption) -> Optional[PartnerProfile]:
    """Turn a partner profile option into the enum.

    Empty strings and "none" mean no profile.

    Raises:
        ValueError: If the value names no known profile
    """
    if value is None or isinstance(value, PartnerProfile):
        return value
    if isinstance(value, str):
        normalized = value.strip().lower()
        if not normalized or normalized == NO_PARTNER_PROFILE:
            return None
        try:
            return PartnerProfile(normalized)
        except ValueError:
            pass
    choices = ", ".join(p.value for p in PartnerProfile)
    raise ValueError(f"Unknown partner profile: {value!r}. Supported profiles: {choices}")


class BidRequestAnalyzer:
    """Analyze raw bid request text into an AnalysisResult.

    The analyzer owns its rule catalogue and, optionally, a result cache.
    Results are memoized on the exact input text plus the analysis options;
    a hit returns the very same AnalysisResult object.

    Example:
        analyzer = BidRequestAnalyzer()
        result = analyzer.analyze(raw_json, force_ctv=True)
        for issue in result.errors:
            print(issue.id, issue.message)
    """

    def __init__(
        self,
        rule_sets: Optional[tuple[RuleSet, ...]] = None,
        cross_field_validators: Optional[Iterable[CrossFieldValidator]] = None,
        cache: Optional[ResultCache] = None,
        force_ctv: bool = False,
        partner_profile: ProfileOption = None,
    ) -> None:
        """Initialize the analyzer.

        Args:
            rule_sets: Rule sets in evaluation order (defaults to the full catalogue)
            cross_field_validators: Validators run after the rules
            cache: Result cache, or None to disable memoization
            force_ctv: Default for the force_ctv option
            partner_profile: Default partner profile
        """
        self._evaluator = RuleEvaluator(rule_sets)
        self._cross_field_validators = tuple(
            cross_field_validators
            if cross_field_validators is not None
            else CROSS_FIELD_VALIDATORS
        )
        self._cache = cache
        self._force_ctv = force_ctv
        self._partner_profile = coerce_partner_profile(partner_profile)

    @property
    def evaluator(self) -> RuleEvaluator:
        return self._evaluator

    @property
    def cache(self) -> Optional[ResultCache]:
        return self._cache

    def analyze(
        self,
        text: str,
        force_ctv: bool = False,
        partner_profile: ProfileOption = None,
    ) -> AnalysisResult:
        """Analyze one bid request.

        Args:
            text: Raw input text, possibly wrapping the request in an envelope
            force_ctv: Apply CTV rules regardless of device type
            partner_profile: Partner profile whose rules should apply, None for
                the analyzer default or "none" to turn partner rules off

        Returns:
            AnalysisResult with summary, ordered issues and located request

        Raises:
            ValueError: If partner_profile names no known profile
        """
        profile = self._resolve_profile(partner_profile)
        force = bool(force_ctv or self._force_ctv)
        cache_key = (text, force, profile.value if profile else None)

        if self._cache is not None:
            cached = self._cache.get(cache_key)
            if cached is not None:
                logger.debug("Result cache hit for %d-character input", len(text))
                return cached

        result = self._run(text, force, profile)

        if self._cache is not None:
            self._cache.set(cache_key, result)
        return result

    def _resolve_profile(self, option: ProfileOption) -> Optional[PartnerProfile]:
        # None falls back to the analyzer default, "none" overrides it
        if isinstance(option, str) and option.strip().lower() == NO_PARTNER_PROFILE:
            return None
        return coerce_partner_profile(option) or self._partner_profile

    def _run(
        self,
        text: str,
        force_ctv: bool,
        partner_profile: Optional[PartnerProfile],
    ) -> AnalysisResult:
        try:
            parsed = parse_request_text(text)
        except RequestParseError as e:
            logger.debug("Bid request text could not be parsed: %s", e)
            return self._parse_failure(str(e))

        root = locate_request(parsed)
        context = build_context(root, force_ctv=force_ctv, partner_profile=partner_profile)

        issues = IssueSink(self._evaluator.evaluate(context))
        if root is not None:
            self._run_cross_field(root, issues)

        result = AnalysisResult(
            summary=derive_summary(root, context),
            issues=list(issues),
            request=root,
        )
        logger.debug(
            "Analyzed request %s: %d error(s), %d warning(s), %d info",
            root.get("id") if root is not None else "<none>",
            len(result.errors),
            len(result.warnings),
            len(result.infos),
        )
        return result

    def _run_cross_field(self, root: Any, issues: IssueSink) -> None:
        for validator in self._cross_field_validators:
            try:
                validator(root, issues)
            except Exception:
                logger.exception("Cross-field validator %s raised", getattr(validator, "__name__", validator))

    @staticmethod
    def _parse_failure(message: str) -> AnalysisResult:
        issues = IssueSink()
        issues.add(
            PARSE_ERROR_ID,
            Severity.ERROR,
            f"The input is not a valid JSON document. {message}",
            path="BidRequest",
        )
        return AnalysisResult(
            summary=AnalysisSummary(),
            issues=list(issues),
            request=None,
            error=message,
        )


@lru_cache
def get_analyzer() -> BidRequestAnalyzer:
    """Get the process-wide analyzer built from settings."""
    settings = get_settings()
    return BidRequestAnalyzer(
        cache=get_result_cache(settings),
        force_ctv=settings.force_ctv,
        partner_profile=settings.default_partner_profile,
    )


def analyze(
    text: str,
    force_ctv: bool = False,
    partner_profile: ProfileOption = None,
) -> AnalysisResult:
    """Analyze bid request text with the process-wide analyzer.

    Args:
        text: Raw input text
        force_ctv: Apply CTV rules regardless of device type
        partner_profile: Partner profile whose rules should apply ("eq" or "none")

    Returns:
        AnalysisResult
    """
    return get_analyzer().analyze(text, force_ctv=force_ctv, partner_profile=partner_profile)
