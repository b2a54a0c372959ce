"""Row builders for the submission tables"""
from typing import Any, Dict

from forms_api.models.forms import ContactForm, FileUploadForm, FormDefinition, MultiStepForm
from forms_api.services.storage import StoredFile
from forms_api.services.validation import UploadedFile


def contact_row(form: ContactForm) -> Dict[str, Any]:
    return form.model_dump(include={"name", "email", "subject", "message"})


def multistep_row(form: MultiStepForm) -> Dict[str, Any]:
    return {
        "first_name": form.first_name,
        "last_name": form.last_name,
        "email": form.email,
        "address_line1": form.address_line1,
        "address_line2": form.address_line2 or None,
        "city": form.city,
        "state": form.state,
        "postal_code": form.postal_code,
        "country": form.country,
        "phone": form.phone or None,
        # JSONB column, camelCase keys as submitted
        "preferences": form.preferences.model_dump(by_alias=True),
    }


def form_document(definition: FormDefinition) -> Dict[str, Any]:
    """The finalized form as the JSON document stored in form_data

    ``options`` is left out for non-choice fields and ``value`` only appears
    when the client sent one, an explicit null included.
    """
    document = definition.model_dump(by_alias=True)
    for field, dumped in zip(definition.fields, document["fields"]):
        if dumped["options"] is None:
            del dumped["options"]
        if "value" not in field.model_fields_set:
            del dumped["value"]
    return document


def dynamic_row(definition: FormDefinition) -> Dict[str, Any]:
    return {"form_data": form_document(definition)}


def file_row(form: FileUploadForm, file: UploadedFile, stored: StoredFile) -> Dict[str, Any]:
    return {
        "name": form.name,
        "email": form.email,
        "file_name": file.filename,
        "file_path": stored.public_path,
        "file_size": file.size,
        "file_type": file.content_type,
    }
