"""
Input Validation for store paths and write pairs.

Functions return (is_valid, error_message) tuples so callers decide
whether to raise.
"""

from typing import Any, Mapping, Tuple

# =============================================================================
# Constants
# =============================================================================

PATH_SEPARATOR = "/"


# =============================================================================
# Validation Functions
# =============================================================================


def validate_path(path: Any, name: str = "path") -> Tuple[bool, str]:
    """
    Validate a store path.

    Args:
        path: Path to validate
        name: Field name for error messages

    Returns:
        (is_valid, error_message)
    """
    if not isinstance(path, str):
        return False, f"{name} must be str, got {type(path).__name__}"

    if not path:
        return False, f"{name} must not be empty"

    return True, ""


def validate_pair(pair: Any) -> Tuple[bool, str]:
    """
    Validate the shape of a write pair.

    Accepts (path, value) 2-tuples/lists, objects with path and value
    attributes, and mappings with "path" and "value" keys.
    """
    if isinstance(pair, Mapping):
        if "path" not in pair or "value" not in pair:
            return False, "pair mapping must have 'path' and 'value' keys"
        return True, ""

    if isinstance(pair, (tuple, list)):
        if len(pair) != 2:
            return False, f"pair must have 2 elements, got {len(pair)}"
        return True, ""

    if hasattr(pair, "path") and hasattr(pair, "value"):
        return True, ""

    return False, f"unsupported pair type {type(pair).__name__}"

