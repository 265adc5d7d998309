"""
Content analyzers: guess financial figures and project stage from diary text.

The contract is all that the diary depends on:

    analyze(text) -> FinancialFigures(cost, profit)
    detect_stage(text) -> ProjectStage or None

RegexContentAnalyzer is the default; any object with the same two methods
can be swapped in.
"""

import re
from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import Optional

from .models import ProjectStage


@dataclass(frozen=True)
class FinancialFigures:
    cost: float = 0.0
    profit: float = 0.0


class ContentAnalyzer(ABC):
    """Pluggable text classifier used when an entry is published."""

    @abstractmethod
    def analyze(self, text: str) -> FinancialFigures:
        pass

    @abstractmethod
    def detect_stage(self, text: str) -> Optional[ProjectStage]:
        pass


# "cost $50", "spent: 50", "paid 1,200.50"
COST_PATTERN = re.compile(
    r"(?:cost|spend|spent|expense|paid)[\s\w:=-]*?\$?\s*(\d+(?:,\d{3})*(?:\.\d+)?)",
    re.IGNORECASE
)
# "profit $200", "earned 200", "made 200"
PROFIT_PATTERN = re.compile(
    r"(?:profit|earn|earned|revenue|income|made)[\s\w:=-]*?\$?\s*(\d+(?:,\d{3})*(?:\.\d+)?)",
    re.IGNORECASE
)

# Checked from the most advanced stage down; first hit wins.
STAGE_PATTERNS = [
    (ProjectStage.PROFITABLE, re.compile(r"\b(?:profitable|break[- ]?even)\b", re.IGNORECASE)),
    (ProjectStage.GROWTH, re.compile(r"\b(?:scal(?:e|ing)|growth|growing|hired)\b", re.IGNORECASE)),
    (ProjectStage.LAUNCH, re.compile(r"\b(?:launch(?:ed)?|went live|released|product hunt)\b", re.IGNORECASE)),
    (ProjectStage.MVP, re.compile(r"\b(?:mvp|prototype|beta)\b", re.IGNORECASE)),
    (ProjectStage.VALIDATION, re.compile(r"\b(?:validat\w*|interview\w*|survey\w*|waitlist)\b", re.IGNORECASE)),
]


def _sum_matches(pattern: re.Pattern, text: str) -> float:
    total = 0.0
    for match in pattern.finditer(text):
        try:
            total += float(match.group(1).replace(",", ""))
        except ValueError:
            continue
    return total


class RegexContentAnalyzer(ContentAnalyzer):
    """Keyword and amount scan over the entry text."""

    def analyze(self, text: str) -> FinancialFigures:
        if not text:
            return FinancialFigures()
        return FinancialFigures(
            cost=_sum_matches(COST_PATTERN, text),
            profit=_sum_matches(PROFIT_PATTERN, text),
        )

    def detect_stage(self, text: str) -> Optional[ProjectStage]:
        for stage, pattern in STAGE_PATTERNS:
            if text and pattern.search(text):
                return stage
        return None


__all__ = [
    "FinancialFigures",
    "ContentAnalyzer",
    "RegexContentAnalyzer",
    "COST_PATTERN",
    "PROFIT_PATTERN",
]
