"""Solution Records — steps, solution sets, and verification results.

Invariants:
    - A SolutionSet is a tuple: ordered and immutable once built
    - Step numbers inside a SolutionSet are contiguous starting at 1
    - Every step carries a non-empty explanation and a non-empty formula

Design Decisions:
    - Normalization is pure: ordering by the oracle's stepNumber, then renumbering,
      so a gap or duplicate number from the oracle never reaches the caller
    - build_solution_set returns None on malformed input; the generator owns the error
"""

from dataclasses import dataclass
from typing import Any


@dataclass(frozen=True)
class SolutionStep:
    step_number: int
    explanation: str
    formula: str


SolutionSet = tuple[SolutionStep, ...]


@dataclass(frozen=True)
class VerificationResult:
    is_correct: bool
    verification_details: str


def build_solution_set(raw_steps: Any) -> SolutionSet | None:
    """Turn the generation oracle's raw step list into a contiguous SolutionSet.

    Returns None when the list is empty, not a list, or any step lacks a
    usable explanation or formula.
    """
    if not isinstance(raw_steps, list) or not raw_steps:
        return None

    parsed: list[tuple[int, int, str, str]] = []
    for position, raw in enumerate(raw_steps):
        if not isinstance(raw, dict):
            return None
        explanation = raw.get("explanation")
        formula = raw.get("formula")
        if not isinstance(explanation, str) or not explanation.strip():
            return None
        if not isinstance(formula, str) or not formula.strip():
            return None
        number = raw.get("stepNumber")
        if not isinstance(number, int) or isinstance(number, bool):
            number = position + 1
        parsed.append((number, position, explanation.strip(), formula.strip()))

    # stable: equal oracle numbers keep their list order
    parsed.sort(key=lambda item: (item[0], item[1]))
    return tuple(
        SolutionStep(step_number=i, explanation=explanation, formula=formula)
        for i, (_, _, explanation, formula) in enumerate(parsed, start=1)
    )


def has_contiguous_numbers(steps: SolutionSet) -> bool:
    return [s.step_number for s in steps] == list(range(1, len(steps) + 1))


def join_solution_text(steps: SolutionSet) -> str:
    """Concatenate every step's explanation and formula, in order."""
    return "\n\n".join(
        f"Step {s.step_number}: {s.explanation}\n{s.formula}" for s in steps
    )
