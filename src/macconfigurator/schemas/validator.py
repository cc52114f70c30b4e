"""Validation engine built on the jsonschema library.

Every check returns the full list of issues instead of failing fast, so an
editor can show all problems in one round trip. Nothing here raises for
malformed input and nothing touches storage.
"""

from typing import Any

from jsonschema import Draft202012Validator
from jsonschema.exceptions import SchemaError
from jsonschema.exceptions import ValidationError as JsonSchemaError
from referencing.exceptions import Unresolvable

from macconfigurator.models.common import ValidationIssue
from macconfigurator.services.versioning import is_valid_range

ROOT_FIELD = "root"

_META_VALIDATOR = Draft202012Validator(
    Draft202012Validator.META_SCHEMA, format_checker=Draft202012Validator.FORMAT_CHECKER
)


def _field_of(error: JsonSchemaError) -> str:
    return "/".join(str(part) for part in error.absolute_path) or ROOT_FIELD


def _to_issues(errors) -> list[ValidationIssue]:
    ordered = sorted(errors, key=lambda e: ([str(p) for p in e.absolute_path], e.message))
    return [
        ValidationIssue(field=_field_of(error), message=error.message, value=error.instance)
        for error in ordered
    ]


def validate_schema(schema: Any) -> list[ValidationIssue]:
    """Check ``schema`` against the JSON Schema 2020-12 meta-schema.

    Meta-schema formats are enforced too, so a ``pattern`` that is not a
    valid regex is reported here rather than when data is checked.
    """
    try:
        return _to_issues(_META_VALIDATOR.iter_errors(schema))
    except Unresolvable as exc:
        return [ValidationIssue(field=ROOT_FIELD, message=f"Unresolvable reference: {exc}")]


def validate_data(data: Any, schema: Any) -> list[ValidationIssue]:
    """Validate ``data`` against ``schema`` and collect every violation.

    An invalid schema matches nothing: a single root issue is returned.
    Callers are expected to run :func:`validate_schema` first.
    """
    try:
        Draft202012Validator.check_schema(schema)
    except SchemaError as exc:
        return [
            ValidationIssue(
                field=ROOT_FIELD,
                message=f"Schema is not a valid JSON Schema: {exc.message}",
            )
        ]

    validator = Draft202012Validator(schema, format_checker=Draft202012Validator.FORMAT_CHECKER)
    try:
        return _to_issues(validator.iter_errors(data))
    except Unresolvable as exc:
        return [ValidationIssue(field=ROOT_FIELD, message=f"Unresolvable reference: {exc}")]


def validate_versions(versions: Any) -> list[ValidationIssue]:
    """Check that every entry is an exact semantic version or a semver range."""
    if not isinstance(versions, (list, tuple)):
        return [ValidationIssue(field="versions", message="Versions must be a list", value=versions)]

    issues = []
    for index, version in enumerate(versions):
        if not is_valid_range(version):
            issues.append(
                ValidationIssue(
                    field=f"versions[{index}]",
                    message=f"Invalid semver: {version}",
                    value=version,
                )
            )
    return issues
