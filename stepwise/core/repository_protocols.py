"""Boundary Protocols — contracts between core services and the shell.

Invariants:
    - Core NEVER imports from infrastructure — dependency arrows point inward only
    - Oracles return the raw wire shape; services validate it
    - Implementations provided by the shell via dependency injection

Design Decisions:
    - Protocol over ABC: structural subtyping, so test fakes need no base class
    - Async in Protocol: implementations do IO (network, possibly a shared cache)
"""

from typing import Any, Protocol

from stepwise.core.domain_types import FilePayload, SubmissionId
from stepwise.core.progression import CacheEntry


class SubmissionStore(Protocol):
    """Keyed cache of per-submission state. Single-writer discipline is the caller's."""
    async def get(self, submission_id: SubmissionId) -> CacheEntry | None: ...
    async def put(self, submission_id: SubmissionId, entry: CacheEntry) -> None: ...
    async def invalidate(self, submission_id: SubmissionId) -> None: ...


class GenerationOracle(Protocol):
    """`{question, filePayload?}` -> `{"steps": [{stepNumber, explanation, formula}]}` or empty."""
    async def generate(
        self, question: str, file_payload: FilePayload | None,
    ) -> dict[str, Any] | None: ...


class CorrectionOracle(Protocol):
    """`{text}` -> `{"correctedText": str, "isCorrect": bool}`."""
    async def correct(self, text: str) -> dict[str, Any]: ...


class VerificationOracle(Protocol):
    """`{question, solutionText}` -> `{"isCorrect": bool, "verificationDetails": str}`."""
    async def verify(self, question: str, solution_text: str) -> dict[str, Any]: ...
