"""Text Corrector — the single two-pass correction step for surfaced prose.

Invariants:
    - Exactly two oracle calls per correct(), unconditionally
    - Pass 2 receives pass 1's output; only pass 2's text is returned
    - A pass that judges its input correct returns that input unchanged,
      so correcting already-correct text is a no-op
    - Oracle failures propagate as OracleError; callers map them to their own failure

Design Decisions:
    - The corrector is not assumed idempotent in one pass: the second call
      re-validates what the first one produced
    - Blank correctedText from the oracle is treated as "no change" rather than
      wiping the text the caller is about to show
"""

import logging

from stepwise.core.domain_types import OracleKind
from stepwise.core.errors import ErrorContext, OracleError
from stepwise.core.repository_protocols import CorrectionOracle
from stepwise.services.oracle_timeout import bounded

logger = logging.getLogger(__name__)


class TextCorrector:
    """Runs every natural-language field through the correction oracle twice."""

    PASSES = 2

    def __init__(
        self, oracle: CorrectionOracle, timeout_seconds: float | None = None,
    ) -> None:
        self.oracle = oracle
        self.timeout_seconds = timeout_seconds

    async def correct(self, text: str, submission_id: str | None = None) -> str:
        current = text
        for pass_number in range(1, self.PASSES + 1):
            current = await self._single_pass(current, pass_number, submission_id)
        return current

    async def _single_pass(
        self, text: str, pass_number: int, submission_id: str | None,
    ) -> str:
        result = await bounded(
            self.oracle.correct(text),
            self.timeout_seconds,
            OracleKind.CORRECTION,
            submission_id,
        )
        if not isinstance(result, dict) or not isinstance(result.get("isCorrect"), bool):
            raise OracleError(
                "correction oracle returned a malformed verdict",
                "malformed_response",
                context=ErrorContext(
                    oracle=OracleKind.CORRECTION.value, submission_id=submission_id,
                ),
            )
        if result["isCorrect"]:
            return text

        corrected = result.get("correctedText")
        if not isinstance(corrected, str) or not corrected.strip():
            logger.warning(
                "Correction pass %d returned blank text, keeping input", pass_number,
                extra={"oracle": OracleKind.CORRECTION.value, "submission_id": submission_id},
            )
            return text
        return corrected
