"""Semver parsing and range matching."""

import pytest

from macconfigurator.services.versioning import (
    is_valid_range,
    is_valid_version,
    satisfies,
)


@pytest.mark.parametrize(
    "version",
    ["1.0.0", "0.0.1", "10.20.30", "1.0.0-alpha.1", "1.0.0+build.5", "v1.0.0", "=1.0.0", " v2.3.4"],
)
def test_valid_exact_versions(version):
    assert is_valid_version(version)


@pytest.mark.parametrize("version", ["1.0", "v1.0", "latest", "", "v", "01.0.0", "^1.0.0", None])
def test_invalid_exact_versions(version):
    assert not is_valid_version(version)


@pytest.mark.parametrize("expression", ["1.0.0", "^1.0.0", "~1.2.3", "1.x", ">=1.0.0 <2.0.0", "1.0.0 - 2.0.0", "*"])
def test_valid_ranges(expression):
    assert is_valid_range(expression)


@pytest.mark.parametrize("expression", ["", "   ", "latest", "=>1.0.0", "1.0.0.0", "a - b", 7])
def test_invalid_ranges(expression):
    assert not is_valid_range(expression)


@pytest.mark.parametrize(
    "version,expression,expected",
    [
        ("1.0.0", "1.0.0", True),
        ("1.0.1", "1.0.0", False),
        ("1.4.2", "^1.0.0", True),
        ("2.0.0", "^1.0.0", False),
        ("1.2.9", "~1.2.0", True),
        ("1.3.0", "~1.2.0", False),
        ("1.5.0", ">=1.0.0 <2.0.0", True),
        ("3.0.0", "1.x || 3.x", True),
        ("1.0.0-beta", "^1.0.0", False),
        ("1.0.0+build.7", "1.0.0", True),
        ("v1.4.2", "^1.0.0", True),
    ],
)
def test_satisfies(version, expression, expected):
    assert satisfies(version, expression) is expected


def test_unparsable_inputs_satisfy_nothing():
    assert not satisfies("not-a-version", "*")
    assert not satisfies("1.0.0", "not-a-range")
