"""Schema validation helpers.

Shape errors are reported as a list of ``"field.path: message"`` strings,
never as a single opaque exception.
"""

from typing import Any, NamedTuple

from pydantic import BaseModel, Field, ValidationError


class ValidationOutcome(NamedTuple):
    """Result of validating a raw payload against a schema."""

    valid: bool
    errors: list[str]
    data: BaseModel | None = None


class ValidationResponse(BaseModel):
    valid: bool
    errors: list[str] = Field(default_factory=list)


def format_validation_errors(exc: ValidationError) -> list[str]:
    """Flatten a pydantic ValidationError into ``field: message`` pairs.

    Examples:
        ``"meets_criteria.view_all_content: Input should be a valid boolean"``
    """
    errors = []
    for err in exc.errors():
        field = ".".join(str(loc) for loc in err.get("loc", ())) or "body"
        errors.append(f"{field}: {err.get('msg', 'Invalid value')}")
    return errors


def validate_payload(schema: type[BaseModel], data: Any) -> ValidationOutcome:
    """Validate ``data`` against ``schema`` without raising."""
    try:
        model = schema.model_validate(data)
    except ValidationError as exc:
        return ValidationOutcome(False, format_validation_errors(exc))
    return ValidationOutcome(True, [], model)
