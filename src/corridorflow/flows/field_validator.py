"""Field-level checks that do not depend on step order."""

from corridorflow.flows.contracts import PipelineDraft
from corridorflow.flows.errors import ErrorKind, ValidationIssue, issues_to_map
from corridorflow.flows.normalizer import is_blank, parse_number

# error key -> (draft attribute, label used in messages)
NUMERIC_FIELDS: dict[str, tuple[str, str]] = {
    "exchangeFeePct": ("exchange_fee_pct", "Exchange fee"),
    "fixedFee": ("fixed_fee", "Fixed fee"),
    "minAmount": ("min_amount", "Minimum amount"),
    "maxAmount": ("max_amount", "Maximum amount"),
}


def validate_fields(draft: PipelineDraft) -> list[ValidationIssue]:
    """Check name, numeric fields and the min/max relationship.

    Blank numeric fields are allowed: fees fall back to 0 and blank
    bounds mean no limit.
    """
    issues: list[ValidationIssue] = []

    if is_blank(draft.name):
        issues.append(ValidationIssue("name", ErrorKind.FIELD, "Name is required."))

    for key, (attr, label) in NUMERIC_FIELDS.items():
        value = getattr(draft, attr)
        if is_blank(value):
            continue
        number = parse_number(value)
        if number is None:
            issues.append(ValidationIssue(key, ErrorKind.FIELD, f"{label} must be a number."))
        elif number < 0:
            issues.append(ValidationIssue(key, ErrorKind.FIELD, f"{label} must not be negative."))

    min_value = parse_number(draft.min_amount)
    max_value = parse_number(draft.max_amount)
    if min_value is not None and max_value is not None and min_value > max_value:
        issues.append(
            ValidationIssue(
                "maxAmount",
                ErrorKind.CROSS_FIELD,
                "Maximum amount must be greater than minimum amount.",
            )
        )

    return issues


def field_errors(draft: PipelineDraft) -> dict[str, str]:
    """Field issues as an error-key -> message map."""
    return issues_to_map(validate_fields(draft))
