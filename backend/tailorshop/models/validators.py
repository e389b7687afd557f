"""Model-level validation utilities for data integrity.

Reusable validators attached with ``@validates`` so that invalid values are
rejected at the ORM level regardless of which service writes them.
"""


def non_negative(key: str, value):
    """Validate that a numeric value is >= 0."""
    if value is not None and value < 0:
        raise ValueError(f"{key} cannot be negative, got {value}")
    return value


def positive(key: str, value):
    """Validate that a numeric value is > 0."""
    if value is not None and value <= 0:
        raise ValueError(f"{key} must be positive, got {value}")
    return value


def validate_string_map(key: str, value):
    """Validate a flat ``{str: str}`` JSON value (or None)."""
    if value is None:
        return value
    if not isinstance(value, dict):
        raise ValueError(f"{key} must be a dict, got {type(value).__name__}")
    for k, v in value.items():
        if not isinstance(k, str) or not isinstance(v, str):
            raise ValueError(f"{key} must map strings to strings")
    return value


def validate_string_list(key: str, value):
    """Validate that a JSON column value is a list of strings (or None)."""
    if value is not None:
        if not isinstance(value, list):
            raise ValueError(f"{key} must be a list, got {type(value).__name__}")
        for i, item in enumerate(value):
            if not isinstance(item, str):
                raise ValueError(f"{key}[{i}] must be a string, got {type(item).__name__}")
    return value
