"""Progression Controller — submit/advance protocol over the generator, verifier, and store.

Invariants:
    - Generation runs at most once per submission id (single-flight task map);
      duplicate submits join the in-flight task or replay step 0 from the cache
    - A failed generation never creates a cache entry
    - advance() and invalidate() for one id are serialized by a per-id lock, so the
      cursor moves by exactly one per accepted request, verification runs once,
      and a DELETE is never undone by an advance that was already running
    - Locks exist only while a request holds or waits on them
    - Re-submitting a finished id replays it with its terminal status
    - The advance revealing the last step runs the verifier and returns COMPLETE;
      N steps complete after exactly N - 1 advances
    - Verification failure leaves delivered steps in the cache, entry marked ERROR,
      and the undelivered last step is not counted as delivered
    - Every failure is returned as a ProgressionResult with status ERROR; nothing
      raises past this boundary

Design Decisions:
    - The transition rules live in core.progression; this module only performs
      the IO around plan_advance() (impureim sandwich)
    - asyncio.shield around the generation task: a disconnecting caller must not
      cancel the work a duplicate caller is waiting on
    - No automatic retry: a new attempt is a fresh submit
"""

import asyncio
import logging
import re
import secrets
from dataclasses import dataclass

from stepwise.core.domain_types import FilePayload, ProgressionStatus, SubmissionId
from stepwise.core.errors import (
    ErrorContext,
    InternalPipelineError,
    StaleSessionError,
    StepwiseError,
    ValidationError,
    VerificationFailure,
)
from stepwise.core.progression import (
    AdvanceAction,
    CacheEntry,
    ProgressionEvent,
    is_terminal,
    plan_advance,
    submit_failure_event,
    transition,
)
from stepwise.core.repository_protocols import SubmissionStore
from stepwise.core.solution import (
    SolutionSet,
    SolutionStep,
    VerificationResult,
    join_solution_text,
)
from stepwise.services.keyed_locks import KeyedLocks
from stepwise.services.step_generator import StepGenerator
from stepwise.services.verifier import Verifier

logger = logging.getLogger(__name__)

_SUBMISSION_ID = re.compile(r"^[A-Za-z0-9_-]{8,128}$")


@dataclass(frozen=True)
class ProgressionResult:
    """What a caller sees after submit/advance/progress."""
    status: ProgressionStatus
    submission_id: SubmissionId | None = None
    question: str | None = None
    step: SolutionStep | None = None
    step_index: int | None = None
    total_steps: int | None = None
    delivered_steps: SolutionSet = ()
    verification: VerificationResult | None = None
    error: StepwiseError | None = None
    replayed: bool = False

    @property
    def message(self) -> str | None:
        return self.error.message if self.error else None


class ProgressionController:
    """Drives one submission from question to verified, step-by-step solution."""

    def __init__(
        self,
        store: SubmissionStore,
        generator: StepGenerator,
        verifier: Verifier,
        question_min_length: int = 3,
        question_max_length: int = 4000,
    ) -> None:
        self.store = store
        self.generator = generator
        self.verifier = verifier
        self.question_min_length = question_min_length
        self.question_max_length = question_max_length
        self._locks = KeyedLocks()
        self._inflight: dict[SubmissionId, asyncio.Future] = {}

    # ─── submit ──────────────────────────────────────────────────

    async def submit(
        self,
        question: str,
        file_payload: FilePayload | None = None,
        submission_id: str | None = None,
    ) -> ProgressionResult:
        """Validate, generate once, cache, and return step 0."""
        sid: SubmissionId | None = None
        try:
            cleaned = self._validate_question(question)
            sid = self._resolve_submission_id(submission_id)
            entry, fresh = await self._generate_once(sid, cleaned, file_payload)
            if entry.question != cleaned:
                raise ValidationError(
                    "Submission id is already used for a different question",
                    field="submission_id",
                )
            if is_terminal(entry.status):
                # a finished submission replays as finished, never as step 0
                return self._view_result(entry, replayed=True)
            logger.info(
                "Submission ready",
                extra={"submission_id": sid, "total_steps": entry.total_steps},
            )
            return self._step_result(entry, 0, replayed=not fresh)
        except StepwiseError as e:
            return self._error_result(e, sid, question, _submit_failure_status(e))
        except Exception as e:
            logger.error(
                "Unexpected error in submit: %s", e, exc_info=True,
                extra={"submission_id": sid},
            )
            return self._error_result(
                InternalPipelineError(ErrorContext(submission_id=sid)), sid, question,
                _submit_failure_status(e),
            )

    def _validate_question(self, question: object) -> str:
        if not isinstance(question, str):
            raise ValidationError("Question must be text.", field="question")
        cleaned = question.strip()
        if len(cleaned) < self.question_min_length:
            raise ValidationError(
                f"Question must be at least {self.question_min_length} characters long.",
                field="question",
            )
        if len(cleaned) > self.question_max_length:
            raise ValidationError(
                f"Question must be at most {self.question_max_length} characters long.",
                field="question",
            )
        return cleaned

    def _resolve_submission_id(self, submission_id: str | None) -> SubmissionId:
        if submission_id is None:
            return SubmissionId(secrets.token_urlsafe(16))
        if not _SUBMISSION_ID.match(submission_id):
            raise ValidationError(
                "Submission id must be 8-128 URL-safe characters",
                field="submission_id",
            )
        return SubmissionId(submission_id)

    async def _generate_once(
        self, sid: SubmissionId, question: str, file_payload: FilePayload | None,
    ) -> tuple[CacheEntry, bool]:
        """Join the in-flight generation for sid, or start one.

        Returns (entry, fresh) where fresh is True only for the caller whose
        task actually ran the generator.
        """
        task = self._inflight.get(sid)
        started_here = task is None
        if task is None:
            task = asyncio.ensure_future(
                self._load_or_generate(sid, question, file_payload),
            )
            self._inflight[sid] = task
            task.add_done_callback(lambda done: self._forget_inflight(sid, done))
        entry, generated = await asyncio.shield(task)
        return entry, started_here and generated

    def _forget_inflight(self, sid: SubmissionId, done: asyncio.Future) -> None:
        if self._inflight.get(sid) is done:
            del self._inflight[sid]
        # retrieve the exception so an abandoned task does not warn
        if not done.cancelled():
            done.exception()

    async def _load_or_generate(
        self, sid: SubmissionId, question: str, file_payload: FilePayload | None,
    ) -> tuple[CacheEntry, bool]:
        existing = await self.store.get(sid)
        if existing is not None:
            return existing, False
        steps = await self.generator.generate(question, file_payload, sid)
        entry = CacheEntry.from_generation(sid, question, steps, file_payload)
        await self.store.put(sid, entry)
        return entry, True

    # ─── advance ─────────────────────────────────────────────────

    async def advance(
        self, submission_id: str, cursor: int | None = None,
    ) -> ProgressionResult:
        """Deliver the next cached step, or verify once after the last one."""
        sid = SubmissionId(submission_id)
        try:
            async with self._locks.hold(sid):
                return await self._advance_locked(sid, cursor)
        except StepwiseError as e:
            return self._error_result(e, sid)
        except Exception as e:
            logger.error(
                "Unexpected error in advance: %s", e, exc_info=True,
                extra={"submission_id": sid},
            )
            return self._error_result(
                InternalPipelineError(ErrorContext(submission_id=sid)), sid,
            )

    async def _advance_locked(
        self, sid: SubmissionId, cursor: int | None,
    ) -> ProgressionResult:
        entry = await self.store.get(sid)
        if entry is None:
            raise StaleSessionError(sid)

        plan = plan_advance(entry, cursor)
        if plan.action is AdvanceAction.REPLAY_STEP:
            return self._step_result(entry, plan.index, replayed=True)

        try:
            if plan.action is AdvanceAction.NEXT_STEP:
                advanced = entry.with_cursor(plan.index)
                await self.store.put(sid, advanced)
                logger.info(
                    "Step delivered",
                    extra={"submission_id": sid, "step_index": plan.index},
                )
                return self._step_result(advanced, plan.index)

            # the last step is only recorded as delivered together with its verdict
            final = (
                entry.with_cursor(plan.index)
                if plan.action is AdvanceAction.FINAL_STEP else entry
            )
            verification = await self.verifier.verify(
                entry.question, join_solution_text(entry.solution_set), sid,
            )
            final = final.with_verification(verification)
            await self.store.put(sid, final)
            logger.info(
                "Submission complete",
                extra={"submission_id": sid, "status": "complete"},
            )
            return self._view_result(final)
        except VerificationFailure:
            await self._mark_failed(sid, entry, ProgressionEvent.VERIFICATION_FAILED)
            raise
        except Exception:
            await self._mark_failed(sid, entry, ProgressionEvent.FAILED)
            raise

    async def _mark_failed(
        self, sid: SubmissionId, entry: CacheEntry, event: ProgressionEvent,
    ) -> None:
        if is_terminal(entry.status):
            return
        await self.store.put(sid, entry.with_failure(event))

    # ─── read / drop ─────────────────────────────────────────────

    async def progress(self, submission_id: str) -> ProgressionResult:
        """Read-only view of everything delivered so far. Never moves the cursor."""
        sid = SubmissionId(submission_id)
        try:
            entry = await self.store.get(sid)
            if entry is None:
                raise StaleSessionError(sid)
            return self._view_result(entry)
        except StepwiseError as e:
            return self._error_result(e, sid)

    async def invalidate(self, submission_id: str) -> None:
        """Drop the entry. Waits for an advance already running on the same id."""
        sid = SubmissionId(submission_id)
        async with self._locks.hold(sid):
            await self.store.invalidate(sid)
        logger.info("Submission invalidated", extra={"submission_id": sid})

    # ─── results ─────────────────────────────────────────────────

    def _step_result(
        self, entry: CacheEntry, index: int, replayed: bool = False,
    ) -> ProgressionResult:
        return ProgressionResult(
            status=ProgressionStatus.STEP_BY_STEP,
            submission_id=entry.submission_id,
            question=entry.question,
            step=entry.step_at(index),
            step_index=index,
            total_steps=entry.total_steps,
            delivered_steps=entry.solution_set[: index + 1],
            replayed=replayed,
        )

    def _view_result(self, entry: CacheEntry, replayed: bool = False) -> ProgressionResult:
        """Entry as stored: its own status, cursor, delivered steps and verdict."""
        return ProgressionResult(
            status=entry.status,
            submission_id=entry.submission_id,
            question=entry.question,
            step=entry.step_at(entry.cursor),
            step_index=entry.cursor,
            total_steps=entry.total_steps,
            delivered_steps=entry.delivered_steps,
            verification=entry.verification,
            replayed=replayed,
        )

    def _error_result(
        self,
        error: StepwiseError,
        sid: SubmissionId | None,
        question: str | None = None,
        status: ProgressionStatus = ProgressionStatus.ERROR,
    ) -> ProgressionResult:
        if error.context.submission_id is None:
            error.context.submission_id = sid
        logger.warning(
            "Progression error: %s", error.message,
            extra={"submission_id": sid, "error_code": error.code},
        )
        return ProgressionResult(
            status=status,
            submission_id=sid,
            question=question if isinstance(question, str) else None,
            error=error,
        )


def _submit_failure_status(error: Exception) -> ProgressionStatus:
    return transition(ProgressionStatus.INITIAL, submit_failure_event(error))
