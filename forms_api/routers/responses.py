"""JSON responses shared by the form endpoints"""
from typing import Any, Dict, Optional

from fastapi import Request, status
from fastapi.responses import JSONResponse

from forms_api.services.submission import OutcomeStatus, SubmissionOutcome
from forms_api.services.validation import FORM_ERROR_KEY


class InvalidJSON(Exception):
    """Request body could not be decoded as JSON"""


async def read_json(request: Request) -> Any:
    try:
        return await request.json()
    except ValueError as exc:
        raise InvalidJSON(str(exc)) from exc


def validation_error_response(errors: Dict[str, list]) -> JSONResponse:
    return JSONResponse(
        status_code=status.HTTP_400_BAD_REQUEST,
        content={"success": False, "errors": errors},
    )


def invalid_json_response() -> JSONResponse:
    return validation_error_response({FORM_ERROR_KEY: ["Request body must be valid JSON"]})


def outcome_response(
    outcome: SubmissionOutcome,
    success_message: str,
    extra: Optional[Dict[str, Any]] = None,
) -> JSONResponse:
    """Map a pipeline outcome onto the {success, ...} response contract"""
    if outcome.status == OutcomeStatus.SUCCEEDED:
        return JSONResponse(content={"success": True, "message": success_message, **(extra or {})})
    if outcome.status == OutcomeStatus.INVALID:
        return validation_error_response(outcome.errors)
    if outcome.status == OutcomeStatus.REJECTED:
        return JSONResponse(
            status_code=status.HTTP_409_CONFLICT,
            content={"success": False, "message": outcome.message},
        )
    return JSONResponse(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        content={"success": False, "message": outcome.message},
    )
