from __future__ import annotations

"""
Configuration Validation Service.

Acts as the gatekeeper between untrusted configuration sources (CLI flags,
the persisted JSON file) and the traversal engine. Handles type coercion
and default value injection so the engine only ever sees clean settings.
"""

import logging
from typing import Any, Dict, List, Optional, Tuple

from treestat.domain.config import CHILD_ORDERS, get_default_config

logger = logging.getLogger(__name__)


# -----------------------------------------------------------------------------
# PUBLIC API
# -----------------------------------------------------------------------------

def validate_config(
        config: Any,
        *,
        strict: bool = False,
) -> Tuple[Dict[str, Any], List[str]]:
    """
    Validate and normalize the provided configuration dictionary.

    Converts loosely typed inputs into the exact types expected by
    ScanConfig. Fills missing keys with domain defaults and drops unknown
    keys.

    Args:
        config: Raw configuration data (usually a dictionary).
        strict: If True, raises exceptions on invalid values instead of coercing.

    Returns:
        Tuple[Dict[str, Any], List[str]]: A tuple containing the normalized
                                          configuration and a list of warnings.
    """
    warnings: List[str] = []
    defaults = get_default_config()

    if not isinstance(config, dict):
        msg = f"Invalid config type: expected dict, received {type(config).__name__}."
        if strict:
            raise TypeError(msg)
        warnings.append(f"{msg} Using defaults.")
        logger.warning(msg)
        return defaults, warnings

    unknown = sorted(k for k in config if k not in defaults)
    for key in unknown:
        warnings.append(f"Unknown field '{key}' ignored.")

    merged: Dict[str, Any] = dict(defaults)
    merged.update({k: v for k, v in config.items() if k in defaults})

    for field in ("max_concurrency", "workers"):
        merged[field] = _as_optional_positive_int(
            merged.get(field), defaults[field], field, warnings, strict
        )

    merged["apparent_size"] = _as_bool(
        merged.get("apparent_size"), defaults["apparent_size"], "apparent_size", warnings, strict
    )

    merged["child_order"] = _as_choice(
        merged.get("child_order"), defaults["child_order"], CHILD_ORDERS,
        "child_order", warnings, strict
    )

    return merged, warnings


# -----------------------------------------------------------------------------
# PRIVATE HELPERS: TYPE COERCION
# -----------------------------------------------------------------------------

def _as_optional_positive_int(
        value: Any,
        fallback: Optional[int],
        field: str,
        warnings: List[str],
        strict: bool
) -> Optional[int]:
    """Accept None or an integer >= 1, coercing numeric strings when lenient."""
    if value is None:
        return None

    candidate: Any = value
    if isinstance(value, str) and not strict:
        s = value.strip().lower()
        if s in ("", "none", "unbounded"):
            return None
        try:
            candidate = int(s)
        except ValueError:
            candidate = value
        else:
            warnings.append(f"Field '{field}' converted from '{value}' to {candidate}.")

    if isinstance(candidate, bool) or not isinstance(candidate, int):
        msg = f"Invalid field '{field}': expected int or None, received {type(value).__name__}."
        if strict:
            raise TypeError(msg)
        warnings.append(f"{msg} Using fallback.")
        return fallback

    if candidate < 1:
        msg = f"Invalid field '{field}': must be >= 1, received {candidate}."
        if strict:
            raise ValueError(msg)
        warnings.append(f"{msg} Using fallback.")
        return fallback

    return candidate


def _as_bool(value: Any, fallback: bool, field: str, warnings: List[str], strict: bool) -> bool:
    """Coerce various input types into native booleans."""
    if isinstance(value, bool):
        return value
    if value is None:
        return fallback

    if not strict:
        if isinstance(value, (int, float)) and value in (0, 1):
            warnings.append(f"Field '{field}' converted from number {value} to bool.")
            return bool(value)
        if isinstance(value, str):
            s = value.strip().lower()
            if s in ("true", "1", "yes", "y", "on"):
                warnings.append(f"Field '{field}' converted from '{value}' to True.")
                return True
            if s in ("false", "0", "no", "n", "off"):
                warnings.append(f"Field '{field}' converted from '{value}' to False.")
                return False

    msg = f"Invalid field '{field}': expected bool, received {type(value).__name__}."
    if strict:
        raise TypeError(msg)
    warnings.append(f"{msg} Using fallback.")
    return fallback


def _as_choice(
        value: Any,
        fallback: str,
        choices: Tuple[str, ...],
        field: str,
        warnings: List[str],
        strict: bool
) -> str:
    """Restrict a string field to a closed set of values (case-insensitive)."""
    if value is None:
        return fallback
    if isinstance(value, str):
        s = value.strip().lower()
        if s in choices:
            return s

    msg = f"Invalid field '{field}': expected one of {', '.join(choices)}, received {value!r}."
    if strict:
        raise ValueError(msg)
    warnings.append(f"{msg} Using fallback.")
    return fallback
