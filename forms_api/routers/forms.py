"""Form handling endpoints"""
from fastapi import APIRouter, Depends, HTTPException, Request
import logging

from forms_api.database import CONTACT_TABLE, DYNAMIC_TABLE, MULTISTEP_TABLE
from forms_api.routers.responses import outcome_response, read_json, validation_error_response
from forms_api.services.records import contact_row, dynamic_row, multistep_row
from forms_api.services.storage import SubmissionStore, get_store
from forms_api.services.submission import SubmissionPipeline
from forms_api.services.validation import (
    STEP_NAMES,
    validate_contact,
    validate_form_definition,
    validate_multi_step,
    validate_step,
)

logger = logging.getLogger(__name__)
router = APIRouter()


@router.post("/contact")
async def submit_contact(request: Request, store: SubmissionStore = Depends(get_store)):
    """Handle contact form submission (PUBLIC endpoint)"""
    body = await read_json(request)
    pipeline = SubmissionPipeline(
        validate_contact,
        lambda form: store.insert(CONTACT_TABLE, contact_row(form)),
        name="contact",
        notice_seconds=None,
    )
    outcome = await pipeline.submit(body)
    return outcome_response(outcome, "Form submitted successfully")


@router.post("/multi-step")
async def submit_multi_step(request: Request, store: SubmissionStore = Depends(get_store)):
    """Handle the final submit of the multi-step form, all steps at once"""
    body = await read_json(request)
    pipeline = SubmissionPipeline(
        validate_multi_step,
        lambda form: store.insert(MULTISTEP_TABLE, multistep_row(form)),
        name="multi-step",
        notice_seconds=None,
    )
    outcome = await pipeline.submit(body)
    return outcome_response(outcome, "Form submitted successfully")


@router.post("/multi-step/steps/{step}")
async def validate_multi_step_step(step: str, request: Request):
    """Validate one wizard step (personal, address, additional) without storing anything"""
    if step not in STEP_NAMES:
        raise HTTPException(status_code=404, detail=f"Unknown step: {step}")

    body = await read_json(request)
    result = validate_step(step, body)
    if not result:
        logger.info(f"Step {step} rejected: {sorted(result.errors)}")
        return validation_error_response(result.errors)

    return {
        "success": True,
        "step": step,
        "data": result.data.model_dump(by_alias=True),
    }


@router.post("/multi-step/dynamic")
async def submit_dynamic(request: Request, store: SubmissionStore = Depends(get_store)):
    """Save a dynamic form configuration as one JSON document"""
    body = await read_json(request)
    pipeline = SubmissionPipeline(
        validate_form_definition,
        lambda definition: store.insert(DYNAMIC_TABLE, dynamic_row(definition)),
        name="dynamic",
        notice_seconds=None,
    )
    outcome = await pipeline.submit(body)
    return outcome_response(outcome, "Form configuration saved successfully")
