"""
Configuration validation utilities.

Every getter reads one environment variable and raises ConfigurationError
with the variable name in the message, so a misconfigured function fails on
its first invocation with an actionable error.
"""

import os
from typing import List, Optional


class ConfigurationError(Exception):
    """Raised when required configuration is missing or invalid."""
    pass


def _read(name: str) -> Optional[str]:
    value = os.getenv(name)
    if value is None:
        return None
    value = value.strip()
    return value or None


def require_env(name: str, description: Optional[str] = None) -> str:
    """
    Return a required environment variable.

    Args:
        name: Environment variable name
        description: What the variable is used for, included in the error

    Raises:
        ConfigurationError: If the variable is unset or blank
    """
    value = _read(name)
    if value is None:
        detail = f" ({description})" if description else ""
        raise ConfigurationError(
            f"Missing required environment variable: {name}{detail}. "
            f"Set it in the function configuration or a local .env file."
        )
    return value


def validate_int_env(name: str, default: Optional[int] = None, min_value: Optional[int] = None,
                     max_value: Optional[int] = None) -> int:
    """
    Return an integer environment variable within optional bounds.

    Raises:
        ConfigurationError: If unset without a default, not an integer, or out of bounds
    """
    raw = _read(name)
    if raw is None:
        if default is None:
            raise ConfigurationError(f"Missing required integer environment variable: {name}")
        return default

    try:
        value = int(raw)
    except ValueError:
        raise ConfigurationError(f"{name} must be an integer, got '{raw}'") from None

    too_low = min_value is not None and value < min_value
    too_high = max_value is not None and value > max_value
    if too_low or too_high:
        bounds = f"[{'' if min_value is None else min_value}, {'' if max_value is None else max_value}]"
        raise ConfigurationError(f"{name}={value} is outside the allowed range {bounds}")
    return value


def validate_choice_env(name: str, choices: List[str], default: Optional[str] = None) -> str:
    """
    Return a case-insensitive choice, lower-cased.

    Raises:
        ConfigurationError: If unset without a default or not one of *choices*
    """
    raw = _read(name)
    if raw is None:
        if default is None:
            raise ConfigurationError(f"Missing required environment variable: {name}")
        return default

    value = raw.lower()
    allowed = [choice.lower() for choice in choices]
    if value not in allowed:
        raise ConfigurationError(f"{name} must be one of {', '.join(allowed)}, got '{raw}'")
    return value
