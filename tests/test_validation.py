"""Tests for forms_api.services.validation: schemas, messages, file checks."""

from conftest import VALID_CONTACT, VALID_MULTI_STEP

from forms_api.models.forms import ContactForm, MultiStepForm
from forms_api.services.validation import (
    FORM_ERROR_KEY,
    UploadedFile,
    check_file,
    validate_contact,
    validate_file_upload,
    validate_form_definition,
    validate_multi_step,
    validate_step,
    validate_values,
)

MiB = 1024 * 1024


# ---------------------------------------------------------------------------
# Contact form
# ---------------------------------------------------------------------------


class TestContact:
    def test_valid(self) -> None:
        result = validate_contact(VALID_CONTACT)
        assert result
        assert isinstance(result.data, ContactForm)
        assert result.data.name == "Ada Lovelace"

    def test_nine_character_message_rejected(self) -> None:
        result = validate_contact({**VALID_CONTACT, "message": "123456789"})
        assert not result
        assert result.errors == {"message": ["message must be at least 10 characters"]}

    def test_ten_character_message_accepted(self) -> None:
        assert validate_contact({**VALID_CONTACT, "message": "1234567890"})

    def test_message_too_long(self) -> None:
        result = validate_contact({**VALID_CONTACT, "message": "x" * 1001})
        assert result.errors == {"message": ["message must be at most 1000 characters"]}

    def test_name_and_subject_bounds(self) -> None:
        result = validate_contact({**VALID_CONTACT, "name": "n" * 101, "subject": "s" * 201})
        assert result.errors == {
            "name": ["name must be at most 100 characters"],
            "subject": ["subject must be at most 200 characters"],
        }

    def test_empty_and_missing_fields_are_required(self) -> None:
        result = validate_contact({"name": "", "email": "ada@analytical.org", "message": "long enough text"})
        assert result.errors == {
            "name": ["name is required"],
            "subject": ["subject is required"],
        }

    def test_invalid_email(self) -> None:
        result = validate_contact({**VALID_CONTACT, "email": "not-an-email"})
        assert result.errors == {"email": ["Invalid email address"]}

    def test_every_error_is_reported(self) -> None:
        result = validate_contact({"email": "nope", "message": "short"})
        assert set(result.errors) == {"name", "email", "subject", "message"}

    def test_non_object_body(self) -> None:
        result = validate_contact(["not", "an", "object"])
        assert result.errors == {FORM_ERROR_KEY: ["Request body must be a JSON object"]}

    def test_wrong_type(self) -> None:
        result = validate_contact({**VALID_CONTACT, "subject": 42})
        assert result.errors == {"subject": ["subject must be a string"]}

    def test_none_never_raises(self) -> None:
        assert not validate_contact(None)


# ---------------------------------------------------------------------------
# Multi-step form
# ---------------------------------------------------------------------------


class TestMultiStep:
    def test_valid_full_submission(self) -> None:
        result = validate_multi_step(VALID_MULTI_STEP)
        assert isinstance(result.data, MultiStepForm)
        assert result.data.address_line2 is None
        assert result.data.preferences.receive_newsletter is True
        assert result.data.preferences.receive_updates is False
        assert result.data.preferences.marketing_consent is False

    def test_preferences_default_to_false(self) -> None:
        payload = {k: v for k, v in VALID_MULTI_STEP.items() if k != "preferences"}
        result = validate_multi_step(payload)
        assert result
        assert result.data.preferences.model_dump(by_alias=True) == {
            "receiveNewsletter": False,
            "receiveUpdates": False,
            "marketingConsent": False,
        }

    def test_full_submission_checks_every_step(self) -> None:
        result = validate_multi_step({"firstName": "Ada"})
        assert "lastName" in result.errors
        assert "addressLine1" in result.errors
        assert "country" in result.errors
        assert "addressLine2" not in result.errors
        assert "phone" not in result.errors

    def test_required_message_uses_wire_name(self) -> None:
        result = validate_multi_step({**VALID_MULTI_STEP, "firstName": ""})
        assert result.errors == {"firstName": ["firstName is required"]}

    def test_preference_flag_type(self) -> None:
        result = validate_multi_step({**VALID_MULTI_STEP, "preferences": {"receiveUpdates": "perhaps"}})
        assert result.errors == {"preferences": ["preferences.receiveUpdates must be true or false"]}


class TestStepValidation:
    def test_personal_step_ignores_later_steps(self) -> None:
        payload = {
            "firstName": "Ada",
            "lastName": "Lovelace",
            "email": "ada@analytical.org",
            # invalid address data must not matter on the first step
            "addressLine1": "",
            "city": 7,
        }
        result = validate_step("personal", payload)
        assert result
        assert set(result.data.model_dump()) == {"first_name", "last_name", "email"}

    def test_personal_step_errors(self) -> None:
        result = validate_step("personal", {"firstName": "Ada"})
        assert set(result.errors) == {"lastName", "email"}

    def test_address_step_only_reports_address_fields(self) -> None:
        result = validate_step("address", {"addressLine1": "1 Main St"})
        assert set(result.errors) == {"city", "state", "postalCode", "country"}

    def test_additional_step_is_optional(self) -> None:
        result = validate_step("additional", {})
        assert result
        assert result.data.phone is None

    def test_unknown_step(self) -> None:
        result = validate_step("payment", {})
        assert list(result.errors) == ["step"]


# ---------------------------------------------------------------------------
# Dynamic form definitions
# ---------------------------------------------------------------------------


def _field(**overrides) -> dict:
    return {"id": "f1", "label": "Name", "type": "text", "required": True, **overrides}


class TestFormDefinition:
    def test_valid(self) -> None:
        result = validate_form_definition({"formName": "Survey", "fields": [_field()]})
        assert result
        assert result.data.form_name == "Survey"
        assert result.data.fields[0].required is True
        assert result.data.fields[0].options is None

    def test_required_defaults_to_false(self) -> None:
        result = validate_form_definition({"formName": "Survey", "fields": [{"id": "a", "label": "Age", "type": "number"}]})
        assert result.data.fields[0].required is False

    def test_choice_field_without_options_gets_empty_list(self) -> None:
        result = validate_form_definition({"formName": "S", "fields": [_field(type="radio")]})
        assert result.data.fields[0].options == []

    def test_option_value_derived_from_label(self) -> None:
        options = [{"label": "Very  Happy", "value": "edited"}, {"label": "Meh"}]
        result = validate_form_definition({"formName": "S", "fields": [_field(type="select", options=options)]})
        assert [o.value for o in result.data.fields[0].options] == ["very_happy", "meh"]

    def test_options_on_text_field_rejected(self) -> None:
        result = validate_form_definition(
            {"formName": "S", "fields": [_field(options=[{"label": "A"}])]}
        )
        assert result.errors == {
            "fields": ["fields.0: options are only allowed for select, radio or checkbox fields"]
        }

    def test_empty_options_on_text_field_dropped(self) -> None:
        result = validate_form_definition({"formName": "S", "fields": [_field(options=[])]})
        assert result.data.fields[0].options is None

    def test_duplicate_ids_rejected(self) -> None:
        fields = [_field(id="a"), _field(id="b"), _field(id="a", label="Other")]
        result = validate_form_definition({"formName": "S", "fields": fields})
        assert result.errors == {"fields": ["field ids must be unique (duplicated: a)"]}

    def test_duplicate_labels_allowed(self) -> None:
        fields = [_field(id="a"), _field(id="b")]
        assert validate_form_definition({"formName": "S", "fields": fields})

    def test_empty_label_rejected(self) -> None:
        result = validate_form_definition({"formName": "S", "fields": [_field(label="")]})
        assert result.errors == {"fields": ["fields.0.label is required"]}

    def test_unknown_type_rejected(self) -> None:
        result = validate_form_definition({"formName": "S", "fields": [_field(type="date")]})
        assert result.errors["fields"][0].startswith("fields.0.type must be one of:")

    def test_missing_fields(self) -> None:
        result = validate_form_definition({"formName": "S"})
        assert result.errors == {"fields": ["fields is required"]}

    def test_value_keeps_its_type(self) -> None:
        fields = [
            _field(id="a", value=True),
            _field(id="b", value=3),
            _field(id="c", value="3"),
            _field(id="d", value=None),
        ]
        result = validate_form_definition({"formName": "S", "fields": fields})
        assert [f.value for f in result.data.fields] == [True, 3, "3", None]


# ---------------------------------------------------------------------------
# File constraints
# ---------------------------------------------------------------------------


def _upload(name: str, content_type: str, size: int) -> UploadedFile:
    return UploadedFile(filename=name, content_type=content_type, content=b"\0" * size)


class TestFileConstraints:
    def test_large_pdf_gets_size_error(self) -> None:
        assert check_file(_upload("report.pdf", "application/pdf", 6 * MiB)) == [
            "File size must be less than 5MB"
        ]

    def test_text_file_gets_type_error(self) -> None:
        assert check_file(_upload("notes.txt", "text/plain", 1 * MiB)) == [
            "File must be JPEG, PNG, or PDF"
        ]

    def test_png_accepted(self) -> None:
        assert check_file(_upload("photo.png", "image/png", 2 * MiB)) == []

    def test_exactly_five_mib_accepted(self) -> None:
        assert check_file(_upload("scan.jpg", "image/jpeg", 5 * MiB)) == []

    def test_both_failures_reported(self) -> None:
        messages = check_file(_upload("movie.mp4", "video/mp4", 6 * MiB))
        assert messages == ["File must be JPEG, PNG, or PDF", "File size must be less than 5MB"]

    def test_missing_file(self) -> None:
        assert check_file(None) == ["file is required"]
        assert check_file(_upload("", "application/octet-stream", 0)) == ["file is required"]

    def test_custom_limits(self) -> None:
        messages = check_file(_upload("a.gif", "image/gif", 2048), allowed_types=["image/gif"], max_size=1024)
        assert messages == ["File size must be less than 1 KB"]


class TestFileUploadForm:
    def test_valid(self) -> None:
        file = _upload("photo.png", "image/png", 10)
        result = validate_file_upload({"name": "Ada", "email": "ada@analytical.org", "file": file})
        assert result
        assert result.data["form"].name == "Ada"
        assert result.data["file"] is file

    def test_field_and_file_errors_merged(self) -> None:
        result = validate_file_upload({"email": "bad", "file": _upload("a.txt", "text/plain", 1)})
        assert result.errors == {
            "name": ["name is required"],
            "email": ["Invalid email address"],
            "file": ["File must be JPEG, PNG, or PDF"],
        }


# ---------------------------------------------------------------------------
# Filled-in dynamic forms
# ---------------------------------------------------------------------------


def _definition():
    fields = [
        {"id": "name", "label": "Name", "type": "text", "required": True},
        {"id": "email", "label": "Email", "type": "email"},
        {"id": "age", "label": "Age", "type": "number"},
        {"id": "mood", "label": "Mood", "type": "radio", "options": [{"label": "Happy"}, {"label": "Very Sad"}]},
        {"id": "topics", "label": "Topics", "type": "checkbox", "options": [{"label": "Python"}, {"label": "Forms"}]},
        {"id": "agree", "label": "Agree", "type": "checkbox", "required": True},
    ]
    return validate_form_definition({"formName": "Survey", "fields": fields}).data


class TestValues:
    def test_valid_answers(self) -> None:
        values = {
            "name": "Ada",
            "email": "ada@analytical.org",
            "age": "36",
            "mood": "very_sad",
            "topics": ["python"],
            "agree": True,
            "unknown": "dropped",
        }
        result = validate_values(_definition(), values)
        assert result
        assert result.data["age"] == 36
        assert result.data["topics"] == ["python"]
        assert "unknown" not in result.data

    def test_required_fields(self) -> None:
        result = validate_values(_definition(), {"name": "  ", "agree": False})
        assert result.errors == {"name": ["Name is required"], "agree": ["Agree is required"]}

    def test_type_errors_keyed_by_id(self) -> None:
        values = {"name": "Ada", "agree": True, "email": "nope", "age": "old", "mood": "angry", "topics": ["cats"]}
        result = validate_values(_definition(), values)
        assert result.errors == {
            "email": ["Invalid email address"],
            "age": ["Age must be a number"],
            "mood": ["Mood must be one of: happy, very_sad"],
            "topics": ["Topics must only contain: python, forms"],
        }

    def test_boolean_is_not_a_number(self) -> None:
        result = validate_values(_definition(), {"name": "Ada", "agree": True, "age": True})
        assert result.errors == {"age": ["Age must be a number"]}

    def test_answers_must_be_an_object(self) -> None:
        assert validate_values(_definition(), ["Ada"]).errors == {FORM_ERROR_KEY: ["Answers must be a JSON object"]}


class TestNumberAnswers:
    def _age(self, value):
        return validate_values(_definition(), {"name": "Ada", "agree": True, "age": value})

    def test_plain_forms_accepted(self) -> None:
        assert self._age(" 36 ").data["age"] == 36
        assert self._age("-2.5").data["age"] == -2.5
        assert self._age("1e3").data["age"] == 1000.0

    def test_python_only_forms_rejected(self) -> None:
        for text in ("1_000", "0x10", "inf", "nan", "1e999"):
            assert self._age(text).errors == {"age": ["Age must be a number"]}, text
