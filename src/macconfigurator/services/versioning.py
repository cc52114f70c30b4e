"""Semantic-version parsing and npm-style range matching."""

import re
from functools import lru_cache

import semantic_version

# Prefix tolerated on requested versions, as in "v1.2.3" or "=1.2.3"
_LOOSE_PREFIX = re.compile(r"^[v=\s]+")


@lru_cache(maxsize=1024)
def _compile_range(expression: str) -> semantic_version.NpmSpec:
    return semantic_version.NpmSpec(expression)


def parse_version(version: str) -> semantic_version.Version | None:
    """Parse an exact ``major.minor.patch[-pre][+build]`` version, or None.

    A leading ``v`` or ``=`` is ignored, so ``v1.2.3`` parses as ``1.2.3``.
    """
    if not isinstance(version, str):
        return None
    try:
        return semantic_version.Version(_LOOSE_PREFIX.sub("", version.strip()))
    except ValueError:
        return None


def is_valid_version(version: str) -> bool:
    return parse_version(version) is not None


def is_valid_range(expression: str) -> bool:
    """True for an exact version or any npm range expression (``^1.2.0``, ``>=1 <2 || 3.x``)."""
    if not isinstance(expression, str) or not expression.strip():
        return False
    try:
        _compile_range(expression)
    # NpmSpec raises AttributeError for malformed hyphen ranges ("a - b")
    except (ValueError, AttributeError):
        return False
    return True


def satisfies(version: str, expression: str) -> bool:
    """Whether ``version`` falls inside ``expression`` under semver precedence.

    Unparsable versions or ranges satisfy nothing.
    """
    parsed = parse_version(version)
    if parsed is None or not is_valid_range(expression):
        return False
    return parsed in _compile_range(expression)
