"""Convert Pydantic validation errors to the ToolError contract and to short store messages."""

from __future__ import annotations

from typing import Any, Optional

from pydantic import ValidationError

from models.errors import ToolError, create_validation_error


def _loc_to_field(loc: tuple[Any, ...]) -> str:
    return ".".join(str(part) for part in loc if part != "__root__")


def _clean_pydantic_message(message: str) -> str:
    prefix = "Value error, "
    return message[len(prefix):] if message.startswith(prefix) else message


def first_validation_issue(error: ValidationError) -> Optional[tuple[str, str]]:
    """Return ``(field, message)`` for the first problem, or None if pydantic reported none."""
    issues = error.errors()
    if not issues:
        return None
    first = issues[0]
    field = _loc_to_field(first.get("loc", ()))
    message = _clean_pydantic_message(first.get("msg", "Invalid value"))
    return field, message


def map_pydantic_validation_error(error: ValidationError) -> ToolError:
    """Report the first argument problem as a VALIDATION_ERROR naming the field."""
    issue = first_validation_issue(error)
    if issue is None:
        return create_validation_error("Invalid arguments")

    field, message = issue
    if field:
        return create_validation_error(f"Invalid {field}: {message}")
    return create_validation_error(message)


def describe_document_error(error: ValidationError) -> str:
    """One-line reason a stored document was rejected, e.g. ``nodes.A.outs.B.weight: ...``."""
    issue = first_validation_issue(error)
    if issue is None:
        return "document does not match the graph schema"

    field, message = issue
    return f"{field}: {message}" if field else message
