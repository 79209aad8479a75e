"""Global pytest configuration."""

import os

# Keep tests independent of a developer's .env before any settings load
os.environ.setdefault("MAX_TRIP_DAYS", "366")
os.environ.setdefault("LOG_MERGE_CONFLICTS", "true")
