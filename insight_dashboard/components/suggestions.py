"""Autocomplete suggestions for the query box.

Two modes, picked by the first character of the query:

* command mode (``/`` prefix): filter the fixed command shortcuts
* free-text mode: keyword-score the fixed phrase list and keep the best
"""
import logging
from typing import Dict, List, Optional

from insight_dashboard.components.models import CommandSuggestion, SuggestionCandidate

logger = logging.getLogger(__name__)

COMMAND_PREFIX = "/"

# Base score when the phrase contains the whole query; added per keyword hit
EXACT_MATCH_SCORE = 10
KEYWORD_MATCH_SCORE = 5
MIN_KEYWORD_LENGTH = 3
DEFAULT_MAX_SUGGESTIONS = 7

AI_SUGGESTIONS: List[str] = [
    "Top performing products this quarter",
    "Sales conversion rate by channel",
    "Market share analysis in key regions",
    "Operational efficiency metrics",
    "Seasonal trends impact on business",
    "Monthly revenue breakdown by product category",
    "Year-over-year revenue growth analysis",
    "Revenue forecast for next quarter",
    "Impact of pricing changes on revenue",
    "Revenue attribution by marketing channel",
    "Customer lifetime value analysis",
    "Customer segmentation by spending patterns",
    "Churn rate analysis for premium customers",
    "New vs returning customer revenue",
    "Customer acquisition cost trends",
    "Sales performance by region",
    "Customer retention rates",
    "Product revenue trends",
    "Marketing campaign effectiveness",
    "Quarterly financial overview",
    "Competitive market analysis",
]

COMMAND_SHORTCUTS: Dict[str, str] = {
    "/revenue": "Detailed revenue breakdown",
    "/customers": "Comprehensive customer metrics",
    "/top-products": "Ranking of top-performing products",
    "/regional-performance": "Comparative regional performance analysis",
    "/forecast": "Revenue and growth prediction",
}


def is_command(query_text: str) -> bool:
    return query_text.startswith(COMMAND_PREFIX)


class SuggestionScorer:
    """Ranks suggestion candidates for a piece of query text"""

    def __init__(
        self,
        phrases: Optional[List[str]] = None,
        commands: Optional[Dict[str, str]] = None,
        max_suggestions: int = DEFAULT_MAX_SUGGESTIONS,
    ):
        self.phrases = list(phrases) if phrases is not None else list(AI_SUGGESTIONS)
        self.commands = dict(commands) if commands is not None else dict(COMMAND_SHORTCUTS)
        self.max_suggestions = max_suggestions

    def suggest(self, query_text: str) -> List[SuggestionCandidate]:
        if is_command(query_text):
            return list(self.match_commands(query_text))
        if not query_text.strip():
            return []
        return list(self.rank_phrases(query_text))

    def match_commands(self, query_text: str) -> List[CommandSuggestion]:
        """Commands whose token contains the query, in declaration order."""
        needle = query_text.lower()
        return [
            (cmd, description)
            for cmd, description in self.commands.items()
            if needle in cmd.lower()
        ]

    def score(self, phrase: str, query_text: str) -> int:
        phrase_lower = phrase.lower()
        query_lower = query_text.lower()
        score = EXACT_MATCH_SCORE if query_lower in phrase_lower else 0
        for keyword in self._keywords(query_lower):
            if keyword in phrase_lower:
                score += KEYWORD_MATCH_SCORE
        return score

    def rank_phrases(self, query_text: str) -> List[str]:
        """Phrases with a positive score, best first, capped at max_suggestions.

        ``sorted`` is stable, so equal scores keep list order.
        """
        scored = [(phrase, self.score(phrase, query_text)) for phrase in self.phrases]
        ranked = sorted(
            (item for item in scored if item[1] > 0),
            key=lambda item: item[1],
            reverse=True,
        )
        return [phrase for phrase, _ in ranked[: self.max_suggestions]]

    @staticmethod
    def _keywords(query_lower: str) -> List[str]:
        return [word for word in query_lower.split() if len(word) >= MIN_KEYWORD_LENGTH]


class SuggestionPanel:
    """Suggestion list plus its visibility flag, as shown under the query box.

    Advisory only: never touches the query session.  The host calls
    ``update`` on every keystroke, ``select`` when a suggestion is clicked
    and ``dismiss`` when the user interacts outside the input and the list.
    """

    def __init__(self, scorer: Optional[SuggestionScorer] = None):
        self.scorer = scorer or SuggestionScorer()
        self.suggestions: List[SuggestionCandidate] = []
        self.visible = False
        self.command_mode = False

    def update(self, query_text: str) -> List[SuggestionCandidate]:
        self.command_mode = is_command(query_text)
        self.suggestions = self.scorer.suggest(query_text)
        self.visible = True
        return self.suggestions

    @property
    def showing(self) -> bool:
        return self.visible and bool(self.suggestions)

    def labels(self) -> List[str]:
        """Display text for each suggestion."""
        return [self.format_label(s) for s in self.suggestions]

    @staticmethod
    def format_label(suggestion: SuggestionCandidate) -> str:
        if isinstance(suggestion, tuple):
            cmd, description = suggestion
            return f"{cmd}: {description}"
        return suggestion

    def select(self, index: int) -> str:
        """Return the query text for the chosen suggestion and close the panel."""
        suggestion = self.suggestions[index]
        query_text = suggestion[0] if isinstance(suggestion, tuple) else suggestion
        logger.debug("Suggestion selected: %r", query_text)
        self.dismiss()
        return query_text

    def dismiss(self) -> None:
        self.suggestions = []
        self.visible = False
