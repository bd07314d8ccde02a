"""Progression State Machine — cache entries and the exhaustive transition table.

Invariants:
    - COMPLETE and ERROR are terminal: no transition leaves them
    - The cursor (last delivered index) only moves forward, one step at a time
    - Verification is attached at most once, only when every step was delivered
    - plan_advance never performs IO; the controller executes the plan it returns

Design Decisions:
    - Transition table as a dict keyed by (status, event): any pair missing from it
      is an illegal move, caught as a programming error by the controller
    - CacheEntry is frozen and updated through `with_*` copies so a half-applied
      mutation can never be observed by a concurrent reader
"""

from dataclasses import dataclass, field, replace
from datetime import datetime, timezone
from enum import Enum

from stepwise.core.domain_types import FilePayload, ProgressionStatus, SubmissionId
from stepwise.core.errors import GenerationFailure, SessionClosedError, ValidationError
from stepwise.core.solution import SolutionSet, SolutionStep, VerificationResult


class ProgressionEvent(str, Enum):
    """Things that happen to a submission."""
    GENERATED = "generated"
    REJECTED = "rejected"
    GENERATION_FAILED = "generation_failed"
    STEP_DELIVERED = "step_delivered"
    VERIFIED = "verified"
    VERIFICATION_FAILED = "verification_failed"
    FAILED = "failed"


TERMINAL_STATES = frozenset({ProgressionStatus.COMPLETE, ProgressionStatus.ERROR})

TRANSITIONS: dict[tuple[ProgressionStatus, ProgressionEvent], ProgressionStatus] = {
    (ProgressionStatus.INITIAL, ProgressionEvent.GENERATED): ProgressionStatus.STEP_BY_STEP,
    (ProgressionStatus.INITIAL, ProgressionEvent.REJECTED): ProgressionStatus.ERROR,
    (ProgressionStatus.INITIAL, ProgressionEvent.GENERATION_FAILED): ProgressionStatus.ERROR,
    (ProgressionStatus.INITIAL, ProgressionEvent.FAILED): ProgressionStatus.ERROR,
    (ProgressionStatus.STEP_BY_STEP, ProgressionEvent.STEP_DELIVERED): ProgressionStatus.STEP_BY_STEP,
    (ProgressionStatus.STEP_BY_STEP, ProgressionEvent.VERIFIED): ProgressionStatus.COMPLETE,
    (ProgressionStatus.STEP_BY_STEP, ProgressionEvent.VERIFICATION_FAILED): ProgressionStatus.ERROR,
    (ProgressionStatus.STEP_BY_STEP, ProgressionEvent.FAILED): ProgressionStatus.ERROR,
}


class IllegalTransitionError(Exception):
    """(status, event) pair absent from TRANSITIONS."""


def transition(status: ProgressionStatus, event: ProgressionEvent) -> ProgressionStatus:
    try:
        return TRANSITIONS[(status, event)]
    except KeyError:
        raise IllegalTransitionError(
            f"No transition from {status.value} on {event.value}",
        )


def is_terminal(status: ProgressionStatus) -> bool:
    return status in TERMINAL_STATES


def submit_failure_event(error: Exception) -> ProgressionEvent:
    """Event that moves a submission out of INITIAL when submit fails."""
    if isinstance(error, ValidationError):
        return ProgressionEvent.REJECTED
    if isinstance(error, GenerationFailure):
        return ProgressionEvent.GENERATION_FAILED
    return ProgressionEvent.FAILED


# ─── Cache Entry ─────────────────────────────────────────────────

@dataclass(frozen=True)
class CacheEntry:
    """Everything the pipeline knows about one submission."""
    submission_id: SubmissionId
    question: str
    solution_set: SolutionSet
    file_payload: FilePayload | None = None
    verification: VerificationResult | None = None
    status: ProgressionStatus = ProgressionStatus.STEP_BY_STEP
    cursor: int = 0
    created_at: datetime = field(default_factory=lambda: datetime.now(timezone.utc))

    @classmethod
    def from_generation(
        cls,
        submission_id: SubmissionId,
        question: str,
        solution_set: SolutionSet,
        file_payload: FilePayload | None = None,
    ) -> "CacheEntry":
        """Entry for a freshly generated solution, step 0 delivered."""
        if not solution_set:
            raise IllegalTransitionError("A cache entry needs at least one step")
        return cls(
            submission_id=submission_id,
            question=question,
            solution_set=solution_set,
            file_payload=file_payload,
            status=transition(ProgressionStatus.INITIAL, ProgressionEvent.GENERATED),
        )

    @property
    def total_steps(self) -> int:
        return len(self.solution_set)

    @property
    def delivered_steps(self) -> SolutionSet:
        return self.solution_set[: self.cursor + 1]

    @property
    def all_delivered(self) -> bool:
        return self.cursor == self.total_steps - 1

    def step_at(self, index: int) -> SolutionStep:
        return self.solution_set[index]

    def with_cursor(self, index: int) -> "CacheEntry":
        if index != self.cursor + 1 or index >= self.total_steps:
            raise IllegalTransitionError(
                f"Cursor must advance by one (at {self.cursor}, asked {index})",
            )
        status = transition(self.status, ProgressionEvent.STEP_DELIVERED)
        return replace(self, cursor=index, status=status)

    def with_verification(self, result: VerificationResult) -> "CacheEntry":
        if self.verification is not None:
            raise IllegalTransitionError("Verification already attached")
        if not self.all_delivered:
            raise IllegalTransitionError(
                "Verification requires every step to be delivered",
            )
        status = transition(self.status, ProgressionEvent.VERIFIED)
        return replace(self, verification=result, status=status)

    def with_failure(self, event: ProgressionEvent) -> "CacheEntry":
        return replace(self, status=transition(self.status, event))


# ─── Advance Planning ────────────────────────────────────────────

class AdvanceAction(str, Enum):
    NEXT_STEP = "next_step"
    # deliver the last step and verify in the same request
    FINAL_STEP = "final_step"
    # every step already delivered (single-step solutions): verify only
    VERIFY = "verify"
    REPLAY_STEP = "replay_step"


@dataclass(frozen=True)
class AdvancePlan:
    action: AdvanceAction
    index: int


def plan_advance(entry: CacheEntry, cursor: int | None = None) -> AdvancePlan:
    """Decide what an advance request means for this entry.

    The request that reveals the last step also carries the verdict, so a
    solution of N steps completes after exactly N - 1 advances (one advance
    for a single-step solution).

    `cursor` is the caller's last seen index; None means trust the server.
    A cursor behind the server replays an already-delivered step without
    touching state, so a retried request never skips a step.
    """
    if is_terminal(entry.status):
        raise SessionClosedError(entry.submission_id, entry.status.value)

    if cursor is not None:
        if cursor < 0 or cursor > entry.cursor:
            raise ValidationError(
                f"Cursor {cursor} is outside the delivered range 0..{entry.cursor}",
                field="cursor",
            )
        if cursor < entry.cursor:
            return AdvancePlan(AdvanceAction.REPLAY_STEP, cursor + 1)

    next_index = entry.cursor + 1
    last_index = entry.total_steps - 1
    if next_index < last_index:
        return AdvancePlan(AdvanceAction.NEXT_STEP, next_index)
    if next_index == last_index:
        return AdvancePlan(AdvanceAction.FINAL_STEP, next_index)
    return AdvancePlan(AdvanceAction.VERIFY, entry.cursor)
