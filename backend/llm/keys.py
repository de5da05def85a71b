"""Local API-key shape checks."""

PLACEHOLDER_MARKERS = ("YOUR_", "your_", "_HERE")
MIN_KEY_LENGTH = 20


def is_valid_api_key(key: str | None, prefix: str) -> bool:
    """Check that a key looks real: set, not a placeholder, long enough, prefixed."""
    if not key:
        return False
    if any(marker in key for marker in PLACEHOLDER_MARKERS):
        return False
    if len(key) < MIN_KEY_LENGTH:
        return False
    return key.startswith(prefix)


def describe_key(key: str | None, prefix: str) -> str:
    """Short status used in startup logs; never includes the key itself."""
    if not key:
        return "missing"
    if is_valid_api_key(key, prefix):
        return "valid"
    return "set but invalid"
