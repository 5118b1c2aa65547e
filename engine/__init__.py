# engine/__init__.py
# ─────────────────────────────
# Init file for the matching engine package
# Exposes core components

from .filters import apply_hard_filters
from .scoring import calculate_match_score
from .explanations import generate_match_explanation
from .diagnostics import analyze_zero_results
from .matcher import Matcher, find_matches
from .options import available_filter_options

__all__ = [
    "apply_hard_filters",
    "calculate_match_score",
    "generate_match_explanation",
    "analyze_zero_results",
    "Matcher",
    "find_matches",
    "available_filter_options",
]
