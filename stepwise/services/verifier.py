"""Verifier — final check of the assembled solution against the question.

Invariants:
    - Exactly one verification oracle call per verify()
    - verificationDetails goes through TextCorrector (two passes) before return
    - Missing/blank details or a non-boolean verdict raise VerificationFailure
"""

import logging

from stepwise.core.domain_types import OracleKind
from stepwise.core.errors import ErrorContext, StepwiseError, VerificationFailure
from stepwise.core.repository_protocols import VerificationOracle
from stepwise.core.solution import VerificationResult
from stepwise.services.oracle_timeout import bounded
from stepwise.services.text_corrector import TextCorrector

logger = logging.getLogger(__name__)


class Verifier:

    def __init__(
        self,
        oracle: VerificationOracle,
        corrector: TextCorrector,
        timeout_seconds: float | None = None,
    ) -> None:
        self.oracle = oracle
        self.corrector = corrector
        self.timeout_seconds = timeout_seconds

    async def verify(
        self, question: str, solution_text: str, submission_id: str | None = None,
    ) -> VerificationResult:
        context = ErrorContext(
            submission_id=submission_id, oracle=OracleKind.VERIFICATION.value,
        )
        try:
            raw = await bounded(
                self.oracle.verify(question, solution_text),
                self.timeout_seconds,
                OracleKind.VERIFICATION,
                submission_id,
            )
        except StepwiseError as e:
            context.retry_after_ms = e.context.retry_after_ms
            raise VerificationFailure(e.message, context=context)

        is_correct = raw.get("isCorrect") if isinstance(raw, dict) else None
        details = raw.get("verificationDetails") if isinstance(raw, dict) else None
        if not isinstance(is_correct, bool) or not isinstance(details, str) or not details.strip():
            raise VerificationFailure("the checker returned a malformed verdict", context=context)

        try:
            details = await self.corrector.correct(details, submission_id)
        except StepwiseError as e:
            context.retry_after_ms = e.context.retry_after_ms
            raise VerificationFailure(e.message, context=context)

        logger.info(
            "Solution verified (correct=%s)", is_correct,
            extra={"submission_id": submission_id},
        )
        return VerificationResult(is_correct=is_correct, verification_details=details)
