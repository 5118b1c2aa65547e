# 📦 utils/errors.py

class MatchingConfigurationError(RuntimeError):
    """Candidate store unreachable, schema missing or client not configured."""


class PreferenceStoreError(RuntimeError):
    """Matching preferences could not be written for audit."""
