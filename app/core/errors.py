# app/core/errors.py
from fastapi import HTTPException, status


class InvalidDateError(ValueError):
    """Raised when a "YYYY-MM-DD" string cannot be parsed."""


class FieldValidationError(HTTPException):
    """
    Field-keyed validation failure.

    Response body:

        {"detail": {"message": "...", "errors": {"week_of": ["..."]}}}

    Clients render each message next to the matching form field instead
    of showing a generic error page.
    """

    def __init__(
        self,
        errors: dict[str, list[str]],
        message: str = "Validation failed",
    ):
        super().__init__(
            status_code=status.HTTP_422_UNPROCESSABLE_ENTITY,
            detail={"message": message, "errors": errors},
        )
        self.errors = errors

    @classmethod
    def single(cls, field: str, message: str) -> "FieldValidationError":
        return cls({field: [message]})


def flatten_request_errors(errors: list[dict]) -> dict[str, list[str]]:
    """
    Collapse FastAPI/Pydantic error entries into {field: [messages]}.

    The first "loc" element ("body", "query", "path") is dropped; nested
    locations are joined with dots.
    """
    flattened: dict[str, list[str]] = {}
    for err in errors:
        loc = [str(part) for part in err.get("loc", ())]
        if loc and loc[0] in {"body", "query", "path", "header"}:
            loc = loc[1:]
        field = ".".join(loc) or "__root__"
        flattened.setdefault(field, []).append(err.get("msg", "Invalid value"))
    return flattened
