"""File upload endpoint"""
from functools import partial
from typing import Optional
from fastapi import APIRouter, Depends, Request
from fastapi.concurrency import run_in_threadpool
from starlette.datastructures import UploadFile
import logging

from forms_api.config import Settings, get_settings
from forms_api.database import FILE_TABLE
from forms_api.routers.responses import outcome_response
from forms_api.services.records import file_row
from forms_api.services.storage import ContentStore, SubmissionStore, get_content_store, get_store
from forms_api.services.submission import SubmissionPipeline
from forms_api.services.validation import UploadedFile, validate_file_upload

logger = logging.getLogger(__name__)
router = APIRouter()


async def _read_upload(value, limit: int) -> Optional[UploadedFile]:
    """Read an uploaded part, never holding more than limit + 1 bytes in memory"""
    if not isinstance(value, UploadFile):
        return None
    if value.size is not None and value.size > limit:
        await value.close()
        return UploadedFile(
            filename=value.filename or "",
            content_type=value.content_type or "",
            reported_size=value.size,
        )
    content = await value.read(limit + 1)
    await value.close()
    return UploadedFile(
        filename=value.filename or "",
        content_type=value.content_type or "",
        content=content,
    )


@router.post("/file-upload")
async def upload_file(
    request: Request,
    store: SubmissionStore = Depends(get_store),
    content_store: ContentStore = Depends(get_content_store),
    settings: Settings = Depends(get_settings),
):
    """Handle a multipart upload with name, email and one file (PUBLIC endpoint)"""
    form = await request.form()
    payload = {
        "name": form.get("name"),
        "email": form.get("email"),
    }
    payload = {key: value for key, value in payload.items() if value is not None}
    payload["file"] = await _read_upload(form.get("file"), settings.max_upload_bytes)

    async def persist(data):
        file = data["file"]

        def report(percent: int):
            logger.debug(f"Writing {file.filename}: {percent}%")

        stored = await run_in_threadpool(content_store.save, file.filename, file.content, report)
        # No cleanup if the insert fails: the stored file stays behind
        await store.insert(FILE_TABLE, file_row(data["form"], file, stored))
        return stored

    pipeline = SubmissionPipeline(
        partial(
            validate_file_upload,
            allowed_types=settings.allowed_upload_types,
            max_size=settings.max_upload_bytes,
        ),
        persist,
        name="file-upload",
        notice_seconds=None,
    )
    outcome = await pipeline.submit(payload)

    extra = None
    if outcome.succeeded:
        upload = payload["file"]
        extra = {
            "file": {
                "name": upload.filename,
                "path": outcome.record.public_path,
                "size": upload.size,
                "type": upload.content_type,
            }
        }
    return outcome_response(outcome, "File uploaded successfully", extra)
