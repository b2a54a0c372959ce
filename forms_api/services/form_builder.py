"""Dynamic form builder state

The builder is an immutable ``BuilderState`` that only changes through
``update(state, action)``, which returns a new state. Nothing is validated
while building; ``finalize`` produces the snapshot that the submission
pipeline validates and stores.
"""
from dataclasses import dataclass, field, replace
from typing import Any, Dict, Mapping, Optional, Tuple, Union

from forms_api.models.forms import option_value, requires_options
from forms_api.utils.ids import IdFactory, uuid_ids


@dataclass(frozen=True)
class OptionDraft:
    label: str

    @property
    def value(self) -> str:
        return option_value(self.label)

    def to_dict(self) -> Dict[str, str]:
        return {"label": self.label, "value": self.value}


@dataclass(frozen=True)
class FieldDraft:
    """A field as configured in the builder, not yet validated"""
    id: str
    label: str = ""
    type: str = "text"
    required: bool = False
    options: Optional[Tuple[OptionDraft, ...]] = None
    value: Any = None

    def to_dict(self) -> Dict[str, Any]:
        data: Dict[str, Any] = {
            "id": self.id,
            "label": self.label,
            "type": self.type,
            "required": self.required,
        }
        if self.options is not None:
            data["options"] = [option.to_dict() for option in self.options]
        if self.value is not None:
            data["value"] = self.value
        return data


def _options(raw: Any) -> Optional[Tuple[OptionDraft, ...]]:
    if raw is None:
        return None
    drafts = []
    for option in raw:
        if isinstance(option, OptionDraft):
            drafts.append(option)
        elif isinstance(option, Mapping):
            drafts.append(OptionDraft(label=option.get("label", "")))
        else:
            drafts.append(OptionDraft(label=str(option)))
    return tuple(drafts)


def create_field(partial: Mapping[str, Any], new_id: IdFactory) -> FieldDraft:
    """Build a field from partial input, generating an id when none is given"""
    return FieldDraft(
        id=partial.get("id") or new_id(),
        label=partial.get("label", ""),
        type=partial.get("type", "text"),
        required=bool(partial.get("required", False)),
        options=_options(partial.get("options")),
        value=partial.get("value"),
    )


@dataclass(frozen=True)
class BuilderState:
    form_name: str = ""
    fields: Tuple[FieldDraft, ...] = ()
    editing_id: Optional[str] = None

    @property
    def field_being_edited(self) -> Optional[FieldDraft]:
        for draft in self.fields:
            if draft.id == self.editing_id:
                return draft
        return None


# Actions

@dataclass(frozen=True)
class SetFormName:
    name: str


@dataclass(frozen=True)
class AddOrUpdateField:
    field: Mapping[str, Any] = field(default_factory=dict)


@dataclass(frozen=True)
class EditField:
    field_id: str


@dataclass(frozen=True)
class CancelEdit:
    pass


@dataclass(frozen=True)
class RemoveField:
    field_id: str


@dataclass(frozen=True)
class Reset:
    pass


Action = Union[SetFormName, AddOrUpdateField, EditField, CancelEdit, RemoveField, Reset]


def update(state: BuilderState, action: Action, new_id: Optional[IdFactory] = None) -> BuilderState:
    """Apply one builder action and return the resulting state"""
    if isinstance(action, SetFormName):
        return replace(state, form_name=action.name)

    if isinstance(action, EditField):
        if not any(draft.id == action.field_id for draft in state.fields):
            return state
        return replace(state, editing_id=action.field_id)

    if isinstance(action, CancelEdit):
        return replace(state, editing_id=None)

    if isinstance(action, RemoveField):
        editing_id = None if state.editing_id == action.field_id else state.editing_id
        fields = tuple(draft for draft in state.fields if draft.id != action.field_id)
        return replace(state, fields=fields, editing_id=editing_id)

    if isinstance(action, Reset):
        return BuilderState()

    if isinstance(action, AddOrUpdateField):
        partial = dict(action.field)
        editing_id = state.editing_id
        if editing_id is not None and partial.get("id") in (None, "", editing_id):
            # Editing keeps the field's identity and position
            partial["id"] = editing_id
            edited = create_field(partial, new_id or uuid_ids())
            fields = tuple(edited if draft.id == editing_id else draft for draft in state.fields)
            return replace(state, fields=fields, editing_id=None)
        created = create_field(partial, new_id or uuid_ids())
        return replace(state, fields=state.fields + (created,))

    raise TypeError(f"Unknown builder action: {action!r}")


def finalize(state: BuilderState) -> Dict[str, Any]:
    """
    Snapshot the builder as a FormDefinition payload

    Choice fields (select, radio, checkbox) without options get an empty
    list so that stored forms never distinguish missing from empty.
    """
    fields = []
    for draft in state.fields:
        data = draft.to_dict()
        if requires_options(draft.type) and "options" not in data:
            data["options"] = []
        fields.append(data)
    return {"formName": state.form_name, "fields": fields}


class FormBuilder:
    """
    Holds the current BuilderState for one editing session

    Thin mutable wrapper for callers that want a session object; every change
    still goes through ``update``.
    """

    def __init__(self, new_id: Optional[IdFactory] = None):
        self.new_id = new_id or uuid_ids()
        self.state = BuilderState()

    def dispatch(self, action: Action) -> BuilderState:
        self.state = update(self.state, action, self.new_id)
        return self.state

    def finalize(self) -> Dict[str, Any]:
        return finalize(self.state)

    def reset(self) -> None:
        self.dispatch(Reset())
