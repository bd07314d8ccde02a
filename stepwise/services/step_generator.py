"""Step Generator — one generation oracle call, normalized into a corrected SolutionSet.

Invariants:
    - Exactly one generation oracle call per generate()
    - Every returned explanation went through TextCorrector (two passes each)
    - Formulas are LaTeX and are never sent to the corrector
    - Any failure raises GenerationFailure; nothing is cached here
    - A failed correction cancels the corrections still running

Design Decisions:
    - Steps corrected concurrently: each field's two passes stay sequential,
      fields are independent of each other
    - Oracle numbering normalized by core.solution.build_solution_set
"""

import asyncio
import logging
from dataclasses import replace

from stepwise.core.domain_types import FilePayload, OracleKind
from stepwise.core.errors import ErrorContext, GenerationFailure, StepwiseError
from stepwise.core.repository_protocols import GenerationOracle
from stepwise.core.solution import SolutionSet, build_solution_set
from stepwise.services.oracle_timeout import bounded
from stepwise.services.text_corrector import TextCorrector

logger = logging.getLogger(__name__)


class StepGenerator:
    """Produces the ordered, corrected solution for one submission."""

    def __init__(
        self,
        oracle: GenerationOracle,
        corrector: TextCorrector,
        timeout_seconds: float | None = None,
    ) -> None:
        self.oracle = oracle
        self.corrector = corrector
        self.timeout_seconds = timeout_seconds

    async def generate(
        self,
        question: str,
        file_payload: FilePayload | None = None,
        submission_id: str | None = None,
    ) -> SolutionSet:
        context = ErrorContext(
            submission_id=submission_id, oracle=OracleKind.GENERATION.value,
        )
        try:
            raw = await bounded(
                self.oracle.generate(question, file_payload),
                self.timeout_seconds,
                OracleKind.GENERATION,
                submission_id,
            )
        except StepwiseError as e:
            context.retry_after_ms = e.context.retry_after_ms
            raise GenerationFailure(e.message, context=context)

        steps = build_solution_set(raw.get("steps") if isinstance(raw, dict) else None)
        if steps is None:
            logger.warning(
                "Generation oracle returned no usable steps",
                extra={"submission_id": submission_id, "oracle": OracleKind.GENERATION.value},
            )
            raise GenerationFailure("the solver returned no usable steps", context=context)

        tasks = [
            asyncio.ensure_future(self.corrector.correct(step.explanation, submission_id))
            for step in steps
        ]
        try:
            explanations = await asyncio.gather(*tasks)
        except StepwiseError as e:
            context.retry_after_ms = e.context.retry_after_ms
            raise GenerationFailure(e.message, context=context)
        finally:
            # one failed field fails the set: stop paying for the others
            for task in tasks:
                task.cancel()

        logger.info(
            "Solution generated",
            extra={"submission_id": submission_id, "total_steps": len(steps)},
        )
        return tuple(
            replace(step, explanation=explanation)
            for step, explanation in zip(steps, explanations)
        )
