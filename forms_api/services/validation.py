"""Validation engine shared by every submission boundary

Every function here is pure and total: malformed input never raises, it
comes back as a ValidationResult whose ``errors`` map each top-level field
name to a list of human-readable messages.
"""
import math
import re
from dataclasses import dataclass, field
from typing import Any, Dict, Iterable, List, Mapping, Optional, Sequence, Type

from email_validator import EmailNotValidError, validate_email
from pydantic import BaseModel, ValidationError

from forms_api.models.forms import (
    WIZARD_STEPS,
    ContactForm,
    FieldDefinition,
    FileUploadForm,
    FormDefinition,
    MultiStepForm,
)
from forms_api.utils.formatting import format_file_size, human_join

# Errors that cannot be pinned on a single field (e.g. body is not an object)
FORM_ERROR_KEY = "form"

DEFAULT_ALLOWED_TYPES = ("image/jpeg", "image/png", "application/pdf")
DEFAULT_MAX_FILE_SIZE = 5 * 1024 * 1024

_TYPE_LABELS = {
    "image/jpeg": "JPEG",
    "image/png": "PNG",
    "application/pdf": "PDF",
}


@dataclass(frozen=True)
class ValidationResult:
    """
    Outcome of validating a payload

    ``data`` holds the typed, coerced value and is only set when valid.
    The result is falsy when invalid::

        result = validate_contact(body)
        if not result:
            return {"success": False, "errors": result.errors}
    """
    data: Any = None
    errors: Dict[str, List[str]] = field(default_factory=dict)

    @property
    def is_valid(self) -> bool:
        return not self.errors

    def __bool__(self) -> bool:
        return self.is_valid


@dataclass(frozen=True)
class UploadedFile:
    """A candidate file taken from a multipart request"""
    filename: str
    content_type: str
    content: bytes = b""
    # Size announced by the request when the body was not read
    reported_size: Optional[int] = None

    @property
    def size(self) -> int:
        if self.reported_size is not None:
            return self.reported_size
        return len(self.content)


def _describe(loc: Sequence[Any]) -> str:
    return ".".join(str(part) for part in loc)


def _message(error: Mapping[str, Any]) -> str:
    kind = error["type"]
    ctx = error.get("ctx") or {}
    loc = error["loc"]
    name = _describe(loc) or "value"

    if kind == "missing":
        return f"{name} is required"
    if kind == "string_too_short":
        if ctx.get("min_length") == 1:
            return f"{name} is required"
        return f"{name} must be at least {ctx['min_length']} characters"
    if kind == "string_too_long":
        return f"{name} must be at most {ctx['max_length']} characters"
    if kind == "string_type":
        return f"{name} must be a string"
    if kind in ("bool_type", "bool_parsing"):
        return f"{name} must be true or false"
    if kind == "literal_error":
        return f"{name} must be one of: {ctx['expected']}"
    if kind == "list_type":
        return f"{name} must be a list"
    if kind in ("model_type", "model_attributes_type", "dict_type"):
        if not loc:
            return "Request body must be a JSON object"
        return f"{name} must be an object"
    # Custom errors (invalid_email, duplicate_field_id, ...) carry their own text
    if len(loc) > 1:
        return f"{name}: {error['msg']}"
    return error["msg"]


def collect_errors(errors: Iterable[Mapping[str, Any]]) -> Dict[str, List[str]]:
    """Flatten pydantic error dicts into {top-level field: [messages]}"""
    collected: Dict[str, List[str]] = {}
    for error in errors:
        loc = error["loc"]
        key = str(loc[0]) if loc else FORM_ERROR_KEY
        message = _message(error)
        messages = collected.setdefault(key, [])
        if message not in messages:
            messages.append(message)
    return collected


def merge_errors(*error_maps: Mapping[str, List[str]]) -> Dict[str, List[str]]:
    merged: Dict[str, List[str]] = {}
    for errors in error_maps:
        for key, messages in errors.items():
            merged.setdefault(key, []).extend(messages)
    return merged


def validate_model(schema: Type[BaseModel], payload: Any) -> ValidationResult:
    """Validate a payload against one of the form schemas"""
    try:
        data = schema.model_validate(payload)
    except ValidationError as exc:
        return ValidationResult(errors=collect_errors(exc.errors()))
    return ValidationResult(data=data)


def validate_contact(payload: Any) -> ValidationResult:
    return validate_model(ContactForm, payload)


def validate_multi_step(payload: Any) -> ValidationResult:
    return validate_model(MultiStepForm, payload)


STEP_NAMES = tuple(name for name, _ in WIZARD_STEPS)


def validate_step(step: str, payload: Any) -> ValidationResult:
    """
    Validate only the fields belonging to one wizard step

    Fields of other steps present in the payload are ignored, so a wizard
    can carry partially filled later steps while the user is still on an
    earlier one.
    """
    schemas = dict(WIZARD_STEPS)
    if step not in schemas:
        return ValidationResult(
            errors={"step": [f"step must be one of: {', '.join(STEP_NAMES)}"]}
        )
    return validate_model(schemas[step], payload)


def validate_form_definition(payload: Any) -> ValidationResult:
    """Structural checks for a dynamic form configuration"""
    return validate_model(FormDefinition, payload)


def check_file(
    file: Optional[UploadedFile],
    allowed_types: Sequence[str] = DEFAULT_ALLOWED_TYPES,
    max_size: int = DEFAULT_MAX_FILE_SIZE,
) -> List[str]:
    """
    Check a candidate upload against the type and size constraints

    Both constraints are evaluated independently; a file that is too large
    and of the wrong type gets both messages.
    """
    if file is None or not file.filename:
        return ["file is required"]

    messages = []
    if file.content_type not in allowed_types:
        labels = [_TYPE_LABELS.get(t, t) for t in allowed_types]
        messages.append(f"File must be {human_join(labels)}")
    if file.size > max_size:
        limit = format_file_size(max_size).replace(" ", "")
        messages.append(f"File size must be less than {limit}")
    return messages


def validate_file_upload(
    payload: Mapping[str, Any],
    allowed_types: Sequence[str] = DEFAULT_ALLOWED_TYPES,
    max_size: int = DEFAULT_MAX_FILE_SIZE,
) -> ValidationResult:
    """
    Validate the upload form: name and email through the schema, the file
    through check_file. ``data`` is ``{"form": FileUploadForm, "file": UploadedFile}``.
    """
    fields = {key: value for key, value in payload.items() if key != "file"}
    result = validate_model(FileUploadForm, fields)
    file = payload.get("file")
    file_errors = check_file(file, allowed_types, max_size)

    errors = merge_errors(result.errors, {"file": file_errors} if file_errors else {})
    if errors:
        return ValidationResult(errors=errors)
    return ValidationResult(data={"form": result.data, "file": file})


# Filled-in dynamic forms

def _is_blank(value: Any) -> bool:
    if value is None or value is False:
        return True
    if isinstance(value, str):
        return not value.strip()
    if isinstance(value, (list, tuple)):
        return len(value) == 0
    return False


_NUMBER_RE = re.compile(r"[+-]?(\d+(\.\d*)?|\.\d+)([eE][+-]?\d+)?")


def _as_number(value: Any) -> Optional[float]:
    if isinstance(value, bool):
        return None
    if isinstance(value, (int, float)):
        number = value
    elif isinstance(value, str):
        text = value.strip()
        if not _NUMBER_RE.fullmatch(text):
            return None
        number = float(text)
        if number.is_integer() and "." not in value and "e" not in value.lower():
            number = int(number)
    else:
        return None
    if isinstance(number, float) and not math.isfinite(number):
        return None
    return number


def _check_value(definition: FieldDefinition, value: Any):
    """Return (cleaned value, error message or None) for one answered field"""
    label = definition.label
    choices = [option.value for option in definition.options or []]

    if definition.type == "text":
        if not isinstance(value, str):
            return None, f"{label} must be text"
        return value, None

    if definition.type == "email":
        if not isinstance(value, str):
            return None, "Invalid email address"
        try:
            validate_email(value, check_deliverability=False)
        except EmailNotValidError:
            return None, "Invalid email address"
        return value, None

    if definition.type == "number":
        number = _as_number(value)
        if number is None:
            return None, f"{label} must be a number"
        return number, None

    if definition.type in ("radio", "select"):
        if not isinstance(value, str) or value not in choices:
            return None, f"{label} must be one of: {', '.join(choices)}"
        return value, None

    # checkbox: a single flag, or a list of checked option values
    if choices:
        selected = [value] if isinstance(value, str) else value
        if not isinstance(selected, (list, tuple)) or any(
            not isinstance(item, str) or item not in choices for item in selected
        ):
            return None, f"{label} must only contain: {', '.join(choices)}"
        return list(selected), None
    if not isinstance(value, bool):
        return None, f"{label} must be true or false"
    return value, None


def validate_values(definition: FormDefinition, values: Mapping[str, Any]) -> ValidationResult:
    """
    Validate answers to a dynamic form, keyed by field id

    Required fields must be answered; answered fields must match their type.
    Answers for ids the form does not define are dropped.
    """
    if not isinstance(values, Mapping):
        return ValidationResult(errors={FORM_ERROR_KEY: ["Answers must be a JSON object"]})

    cleaned: Dict[str, Any] = {}
    errors: Dict[str, List[str]] = {}
    for field_definition in definition.fields:
        value = values.get(field_definition.id)
        if _is_blank(value):
            if field_definition.required:
                errors[field_definition.id] = [f"{field_definition.label} is required"]
            else:
                cleaned[field_definition.id] = value
            continue
        clean, message = _check_value(field_definition, value)
        if message:
            errors[field_definition.id] = [message]
        else:
            cleaned[field_definition.id] = clean

    if errors:
        return ValidationResult(errors=errors)
    return ValidationResult(data=cleaned)
