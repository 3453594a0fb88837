"""Non-raising request validation.

Handlers validate raw payloads with ``safe_parse`` and branch on the result
instead of relying on exceptions for expected bad input.
"""

from dataclasses import dataclass
from typing import Any, Generic, Optional, Type, TypeVar

from pydantic import BaseModel
from pydantic import ValidationError as PydanticValidationError

M = TypeVar("M", bound=BaseModel)

# Leading loc entries naming where in the request a field came from
REQUEST_PARTS = ("body", "path", "query", "header")


@dataclass(frozen=True)
class ParseResult(Generic[M]):
    success: bool
    data: Optional[M] = None
    error: Optional[str] = None


def describe_issue(issue: dict) -> str:
    """Render one pydantic error as ``field: message``."""
    location = ".".join(str(part) for part in issue.get("loc", ()) if part not in REQUEST_PARTS)
    message = issue.get("msg", "invalid value")
    return f"{location}: {message}" if location else message


def safe_parse(model: Type[M], payload: Any) -> ParseResult[M]:
    """Validate ``payload`` against ``model`` without raising.

    Only the first issue is reported, prefixed with ``Validation failed:``.
    """
    try:
        return ParseResult(success=True, data=model.model_validate(payload))
    except PydanticValidationError as e:
        return ParseResult(success=False, error=f"Validation failed: {describe_issue(e.errors()[0])}")
