"""Form-related Pydantic models

One schema per form kind. The same classes back the HTTP handlers, the
wizard step checks and the submission pipeline.
"""
import re
from typing import Annotated, List, Literal, Optional, Tuple, Type, Union

from email_validator import EmailNotValidError, validate_email
from pydantic import AfterValidator, BaseModel, ConfigDict, Field, field_validator, model_validator
from pydantic.alias_generators import to_camel
from pydantic_core import PydanticCustomError

FieldType = Literal["text", "email", "number", "checkbox", "radio", "select"]

CHOICE_TYPES = ("select", "radio", "checkbox")


def requires_options(field_type: str) -> bool:
    """Whether a field of this type carries a list of options"""
    return field_type in CHOICE_TYPES


def option_value(label: str) -> str:
    """Derive an option value from its label ("Very Happy" -> "very_happy")"""
    return re.sub(r"\s+", "_", label.lower())


def _check_email(value: str) -> str:
    try:
        validate_email(value, check_deliverability=False)
    except EmailNotValidError:
        raise PydanticCustomError("invalid_email", "Invalid email address") from None
    return value


Email = Annotated[str, AfterValidator(_check_email)]


class FormModel(BaseModel):
    """Base for all form payloads: camelCase on the wire, snake_case in Python"""
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


# Contact form

class ContactForm(FormModel):
    """Contact form submission"""
    name: str = Field(min_length=1, max_length=100)
    email: Email
    subject: str = Field(min_length=1, max_length=200)
    message: str = Field(min_length=10, max_length=1000)


# Multi-step form, one model per wizard step

class Preferences(FormModel):
    """Consent flags collected on the last wizard step"""
    receive_newsletter: bool = False
    receive_updates: bool = False
    marketing_consent: bool = False


class PersonalInfo(FormModel):
    first_name: str = Field(min_length=1)
    last_name: str = Field(min_length=1)
    email: Email


class AddressInfo(FormModel):
    address_line1: str = Field(min_length=1)
    address_line2: Optional[str] = None
    city: str = Field(min_length=1)
    state: str = Field(min_length=1)
    postal_code: str = Field(min_length=1)
    country: str = Field(min_length=1)


class AdditionalInfo(FormModel):
    phone: Optional[str] = None
    preferences: Preferences = Field(default_factory=Preferences)


class MultiStepForm(PersonalInfo, AddressInfo, AdditionalInfo):
    """All three wizard steps, validated together on final submit"""


WIZARD_STEPS: Tuple[Tuple[str, Type[FormModel]], ...] = (
    ("personal", PersonalInfo),
    ("address", AddressInfo),
    ("additional", AdditionalInfo),
)


# Dynamic form builder

class FieldOption(FormModel):
    """Choice for a select, radio or checkbox field"""
    label: str
    value: str = ""

    @model_validator(mode="after")
    def _derive_value(self) -> "FieldOption":
        # value always follows the label, whatever the client sent
        self.value = option_value(self.label)
        return self


class FieldDefinition(FormModel):
    """One configurable field of a dynamic form"""
    id: str = Field(min_length=1)
    label: str = Field(min_length=1)
    type: FieldType
    required: bool = False
    options: Optional[List[FieldOption]] = None
    value: Optional[Union[bool, int, float, str]] = None

    @model_validator(mode="after")
    def _check_options(self) -> "FieldDefinition":
        if requires_options(self.type):
            if self.options is None:
                self.options = []
        elif self.options:
            raise PydanticCustomError(
                "options_not_allowed",
                "options are only allowed for select, radio or checkbox fields",
            )
        else:
            self.options = None
        return self


class FormDefinition(FormModel):
    """A named, ordered collection of field definitions"""
    form_name: str
    fields: List[FieldDefinition]

    @field_validator("fields")
    @classmethod
    def _unique_ids(cls, fields: List[FieldDefinition]) -> List[FieldDefinition]:
        seen = set()
        duplicated = []
        for field in fields:
            if field.id in seen and field.id not in duplicated:
                duplicated.append(field.id)
            seen.add(field.id)
        if duplicated:
            raise PydanticCustomError(
                "duplicate_field_id",
                "field ids must be unique (duplicated: {ids})",
                {"ids": ", ".join(duplicated)},
            )
        return fields


# File upload form (the file itself is checked separately)

class FileUploadForm(FormModel):
    name: str = Field(min_length=1)
    email: Email
