"""Settings for the booking service, read once from the environment."""

from __future__ import annotations

import os
from datetime import time
from pathlib import Path


def _time(raw: str) -> time:
    hour, minute = raw.split(":")
    return time(int(hour), int(minute))


# Timestamps are written with a fixed offset (KST by default).
UTC_OFFSET_HOURS = int(os.environ.get("ROOMBOOK_UTC_OFFSET_HOURS", "9"))

# Bookable day and grid granularity
DAY_START = _time(os.environ.get("ROOMBOOK_DAY_START", "08:00"))
DAY_END = _time(os.environ.get("ROOMBOOK_DAY_END", "18:00"))
SLOT_MINUTES = int(os.environ.get("ROOMBOOK_SLOT_MINUTES", "30"))
PICKER_MINUTES = int(os.environ.get("ROOMBOOK_PICKER_MINUTES", "10"))

# A start this many minutes in the past is still bookable.
PAST_GRACE_MINUTES = int(os.environ.get("ROOMBOOK_PAST_GRACE_MINUTES", "30"))

SEARCH_LIMIT = int(os.environ.get("ROOMBOOK_SEARCH_LIMIT", "10"))

PROFILE_PATH = Path(os.environ.get("ROOMBOOK_PROFILE_PATH", "data/profile.json"))

LOG_LEVEL = os.environ.get("ROOMBOOK_LOG_LEVEL", "INFO").upper()

SEED_SAMPLE_DATA = os.environ.get("ROOMBOOK_SEED", "0") == "1"

# created_by tag written by the booking form
MANUAL_SOURCE = "manual"
