"""Multi-step form navigation"""
from dataclasses import dataclass, field, replace
from typing import Any, Dict, Mapping, Tuple

from forms_api.services.validation import STEP_NAMES, ValidationResult, validate_step


@dataclass(frozen=True)
class WizardState:
    """Current step plus everything entered so far, across all steps"""
    step: int = 0
    values: Dict[str, Any] = field(default_factory=dict)

    @property
    def step_name(self) -> str:
        return STEP_NAMES[self.step]

    @property
    def is_last_step(self) -> bool:
        return self.step == len(STEP_NAMES) - 1


def enter(state: WizardState, values: Mapping[str, Any]) -> WizardState:
    """Record edits without validating them"""
    return replace(state, values={**state.values, **values})


def advance(state: WizardState, values: Mapping[str, Any]) -> Tuple[WizardState, ValidationResult]:
    """
    Record ``values`` and move to the next step if the current step is valid

    Only the current step's fields are checked; on failure the step is
    unchanged but the entered values are kept.
    """
    state = enter(state, values)
    result = validate_step(state.step_name, state.values)
    if result and not state.is_last_step:
        state = replace(state, step=state.step + 1)
    return state, result


def back(state: WizardState) -> WizardState:
    return replace(state, step=max(state.step - 1, 0))
