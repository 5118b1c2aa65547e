# 📦 engine/terms.py
# ─────────────────────────────
# Fuzzy term matching shared by the specialty and methods rules.
# Bidirectional, case-insensitive substring containment.

from typing import Iterable, List


def normalize_terms(terms: Iterable[str]) -> List[str]:
    """Lower-case and strip; blanks are dropped ("" is a substring of everything)."""
    return [t.strip().lower() for t in terms or [] if t and t.strip()]


def terms_match(a: str, b: str) -> bool:
    a, b = a.strip().lower(), b.strip().lower()
    if not a or not b:
        return False
    return a in b or b in a


def matches_any(term: str, terms: Iterable[str]) -> bool:
    return any(terms_match(term, other) for other in terms)
