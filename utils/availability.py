# 📦 utils/availability.py
# ─────────────────────────────
# Derive availability status and wait estimate from a therapist's free-text note

import re
from datetime import date
from typing import NamedTuple, Optional

from schemas.schemas import AvailabilityStatus

URGENT_PATTERNS = [
    re.compile(r"heute", re.I),
    re.compile(r"sofort", re.I),
    re.compile(r"innerhalb.*(?:tage|wochen)", re.I),
    re.compile(r"kurzfrist", re.I),
    re.compile(r"freie?n?\s+slots?", re.I),
    re.compile(r"akut", re.I),
    re.compile(r"telefon", re.I),
]

SOON_PATTERNS = [
    re.compile(r"nächste[rn]?\s+woche", re.I),
    re.compile(r"in\s+[12]\s*wochen?", re.I),
    re.compile(r"ab\s+kommender\s+woche", re.I),
    re.compile(r"ab\s+\d{1,2}\.\s*(?:kw|woche)", re.I),
    re.compile(r"slots?\s+in\s+1", re.I),
]

WAITLIST_PATTERNS = [
    re.compile(r"warteliste", re.I),
    re.compile(r"keine\s+kapazität", re.I),
    re.compile(r"auf\s+anfrage", re.I),
    re.compile(r"ausgebucht", re.I),
]

MONTHS_DE = {
    "januar": 1, "jaenner": 1, "jänner": 1,
    "februar": 2,
    "märz": 3, "maerz": 3,
    "april": 4,
    "mai": 5,
    "juni": 6,
    "juli": 7,
    "august": 8,
    "september": 9,
    "oktober": 10,
    "november": 11,
    "dezember": 12, "dez": 12,
}

DATE_PATTERN = re.compile(r"(\d{1,2})\.\s*(" + "|".join(MONTHS_DE) + r")\b")

# rank -> (status, estimated wait in weeks)
RANK_AVAILABILITY = {
    0: (AvailabilityStatus.AVAILABLE, 0),
    1: (AvailabilityStatus.AVAILABLE, 1),
    2: (AvailabilityStatus.LIMITED, 3),
    3: (AvailabilityStatus.WAITLIST, 6),
    4: (AvailabilityStatus.UNAVAILABLE, 12),
}


class AvailabilityMeta(NamedTuple):
    rank: int  # 0 = immediately .. 4 = no capacity
    status: AvailabilityStatus
    wait_weeks: int
    next_available: Optional[date]


def extract_next_date(note: str, today: date) -> Optional[date]:
    """First "<day>. <month>" in the note; dates already past roll into next year."""
    match = DATE_PATTERN.search(note)
    if not match:
        return None
    day, month = int(match.group(1)), MONTHS_DE[match.group(2)]
    try:
        candidate = date(today.year, month, day)
        if candidate < today:
            candidate = date(today.year + 1, month, day)
    except ValueError:
        return None
    return candidate


def get_availability_meta(note: Optional[str], accepting_clients: bool, today: Optional[date] = None) -> AvailabilityMeta:
    today = today or date.today()
    if not note:
        note = "Aktuell verfügbar" if accepting_clients else "Kapazität auf Anfrage"
    text = note.lower()
    rank = 1 if accepting_clients else 3

    if any(p.search(text) for p in WAITLIST_PATTERNS):
        rank = 4
    if any(p.search(text) for p in SOON_PATTERNS):
        rank = min(rank, 1)
    if any(p.search(text) for p in URGENT_PATTERNS):
        rank = 0

    next_date = extract_next_date(text, today)
    if next_date:
        diff_days = (next_date - today).days
        if diff_days <= 7:
            rank = min(rank, 1)
        elif diff_days <= 21:
            rank = max(rank, 2)
        else:
            rank = max(rank, 3)

    status, weeks = RANK_AVAILABILITY[rank]
    return AvailabilityMeta(rank, status, weeks, next_date)
