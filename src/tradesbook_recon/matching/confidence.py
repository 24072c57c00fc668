"""Confidence tiers for suggested matches."""

from typing import Optional

from ..config import ConfidenceSettings
from ..models.match import Confidence, MatchRule, SuggestedMatch

DEFAULT_SETTINGS = ConfidenceSettings()


def classify(
    rule: MatchRule,
    day_gap: int,
    settings: Optional[ConfidenceSettings] = None,
) -> Confidence:
    """
    Map a match rule and day gap to a confidence tier.

    Only an exact expense amount can reach HIGH; the VAT uplift rule tops
    out at MEDIUM.
    """
    settings = settings or DEFAULT_SETTINGS

    if rule == MatchRule.INVOICE_AMOUNT:
        if day_gap <= settings.invoice_high_days:
            return Confidence.HIGH
        if day_gap <= settings.invoice_medium_days:
            return Confidence.MEDIUM
        return Confidence.LOW

    if rule == MatchRule.EXACT_AMOUNT and day_gap <= settings.expense_high_days:
        return Confidence.HIGH
    if day_gap <= settings.expense_medium_days:
        return Confidence.MEDIUM
    return Confidence.LOW


def score_confidence(
    match: SuggestedMatch,
    settings: Optional[ConfidenceSettings] = None,
) -> Confidence:
    """Classify a suggested match into high, medium or low."""
    return classify(match.rule, match.day_gap, settings)
