"""Submission pipeline: validate, then persist, one attempt at a time"""
import asyncio
import logging
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Awaitable, Callable, Dict, List, Optional

from forms_api.services.validation import ValidationResult

logger = logging.getLogger(__name__)

GENERIC_ERROR_MESSAGE = "An error occurred while processing your submission"
IN_PROGRESS_MESSAGE = "A submission is already in progress"


class SubmissionState(str, Enum):
    IDLE = "idle"
    VALIDATING = "validating"
    PERSISTING = "persisting"
    SUCCEEDED = "succeeded"
    FAILED = "failed"


class OutcomeStatus(str, Enum):
    SUCCEEDED = "succeeded"
    # Field-level errors, nothing stored
    INVALID = "invalid"
    # Storage or unexpected error, nothing (or not everything) stored
    FAILED = "failed"
    # Another submission was still in flight
    REJECTED = "rejected"


@dataclass(frozen=True)
class SubmissionOutcome:
    status: OutcomeStatus
    errors: Dict[str, List[str]] = field(default_factory=dict)
    message: Optional[str] = None
    record: Any = None

    @property
    def succeeded(self) -> bool:
        return self.status == OutcomeStatus.SUCCEEDED


Validator = Callable[[Any], ValidationResult]
Persist = Callable[[Any], Awaitable[Any]]


class SubmissionPipeline:
    """
    Drives one form instance through Idle -> Validating -> Persisting -> Succeeded

    A submit while validating or persisting is rejected, so at most one
    attempt is in flight per pipeline. Failures return to Idle with the
    submitted input kept in ``last_input`` for a retry. On success
    ``on_success`` clears the caller's working state and a success notice
    stays visible for ``notice_seconds`` (None keeps it until the next
    submit).
    """

    def __init__(
        self,
        validator: Validator,
        persist: Persist,
        name: str = "form",
        on_success: Optional[Callable[[], None]] = None,
        notice_seconds: Optional[float] = 5.0,
    ):
        self.validator = validator
        self.persist = persist
        self.name = name
        self.on_success = on_success
        self.notice_seconds = notice_seconds

        self.state = SubmissionState.IDLE
        self.transitions: List[SubmissionState] = [SubmissionState.IDLE]
        self.last_input: Any = None
        self.last_outcome: Optional[SubmissionOutcome] = None
        self.success_visible = False
        self._notice_timer: Optional[asyncio.TimerHandle] = None

    @property
    def in_flight(self) -> bool:
        return self.state in (SubmissionState.VALIDATING, SubmissionState.PERSISTING)

    def _transition(self, state: SubmissionState) -> None:
        logger.debug(f"{self.name} submission: {self.state.value} -> {state.value}")
        self.state = state
        self.transitions.append(state)

    def _fail(self, outcome: SubmissionOutcome) -> SubmissionOutcome:
        self._transition(SubmissionState.FAILED)
        self._transition(SubmissionState.IDLE)
        self.last_outcome = outcome
        return outcome

    def _show_notice(self) -> None:
        self.success_visible = True
        if self.notice_seconds is not None:
            loop = asyncio.get_running_loop()
            self._notice_timer = loop.call_later(self.notice_seconds, self.clear_notice)

    def clear_notice(self) -> None:
        self.success_visible = False
        if self._notice_timer is not None:
            self._notice_timer.cancel()
            self._notice_timer = None

    async def submit(self, payload: Any) -> SubmissionOutcome:
        if self.in_flight:
            logger.info(f"Rejected {self.name} submission: previous attempt still {self.state.value}")
            return SubmissionOutcome(OutcomeStatus.REJECTED, message=IN_PROGRESS_MESSAGE)

        self.clear_notice()
        self.last_input = payload
        self._transition(SubmissionState.VALIDATING)

        try:
            result = self.validator(payload)
        except Exception:
            logger.exception(f"Unexpected error validating {self.name} submission")
            return self._fail(SubmissionOutcome(OutcomeStatus.FAILED, message=GENERIC_ERROR_MESSAGE))

        if not result:
            logger.info(f"Invalid {self.name} submission: {sorted(result.errors)}")
            return self._fail(SubmissionOutcome(OutcomeStatus.INVALID, errors=result.errors))

        self._transition(SubmissionState.PERSISTING)
        try:
            record = await self.persist(result.data)
        except Exception:
            logger.exception(f"Error storing {self.name} submission")
            return self._fail(SubmissionOutcome(OutcomeStatus.FAILED, message=GENERIC_ERROR_MESSAGE))

        self._transition(SubmissionState.SUCCEEDED)
        logger.info(f"Stored {self.name} submission")
        self.last_input = None
        if self.on_success:
            self.on_success()
        self._show_notice()
        self.last_outcome = SubmissionOutcome(OutcomeStatus.SUCCEEDED, record=record)
        return self.last_outcome
