"""Solution Records — normalization of raw oracle steps and solution text.

Tests cover:
    - Contiguous renumbering from 1, ordered by the oracle's stepNumber
    - Malformed input (empty, non-list, missing fields) returns None
    - join_solution_text keeps step order and includes every formula
"""

from stepwise.core.solution import (
    SolutionStep,
    build_solution_set,
    has_contiguous_numbers,
    join_solution_text,
)


def _raw(number, explanation="Explain.", formula="x = 1"):
    return {"stepNumber": number, "explanation": explanation, "formula": formula}


def test_well_formed_steps_kept_in_order():
    steps = build_solution_set([_raw(1, "a"), _raw(2, "b"), _raw(3, "c")])
    assert [s.explanation for s in steps] == ["a", "b", "c"]
    assert has_contiguous_numbers(steps)


def test_gaps_are_renumbered():
    steps = build_solution_set([_raw(2, "a"), _raw(5, "b"), _raw(9, "c")])
    assert [s.step_number for s in steps] == [1, 2, 3]
    assert [s.explanation for s in steps] == ["a", "b", "c"]


def test_out_of_order_numbers_sorted():
    steps = build_solution_set([_raw(3, "c"), _raw(1, "a"), _raw(2, "b")])
    assert [s.explanation for s in steps] == ["a", "b", "c"]


def test_duplicate_numbers_keep_list_order():
    steps = build_solution_set([_raw(1, "first"), _raw(1, "second")])
    assert [s.explanation for s in steps] == ["first", "second"]
    assert [s.step_number for s in steps] == [1, 2]


def test_missing_step_number_uses_position():
    steps = build_solution_set([
        {"explanation": "a", "formula": "1"},
        {"explanation": "b", "formula": "2"},
    ])
    assert [s.step_number for s in steps] == [1, 2]


def test_whitespace_trimmed():
    steps = build_solution_set([_raw(1, "  spaced  ", "  x = 2 ")])
    assert steps[0] == SolutionStep(1, "spaced", "x = 2")


def test_empty_list_is_malformed():
    assert build_solution_set([]) is None


def test_non_list_is_malformed():
    assert build_solution_set(None) is None
    assert build_solution_set({"stepNumber": 1}) is None


def test_blank_explanation_is_malformed():
    assert build_solution_set([_raw(1), _raw(2, explanation="   ")]) is None


def test_missing_formula_is_malformed():
    assert build_solution_set([{"stepNumber": 1, "explanation": "a"}]) is None


def test_non_dict_step_is_malformed():
    assert build_solution_set(["step one"]) is None


def test_solution_set_is_immutable_tuple():
    steps = build_solution_set([_raw(1)])
    assert isinstance(steps, tuple)


def test_join_includes_every_explanation_and_formula_in_order():
    steps = build_solution_set([
        _raw(1, "Subtract 5.", "2x = 10"),
        _raw(2, "Divide by 2.", "x = 5"),
    ])
    text = join_solution_text(steps)
    assert text.index("Subtract 5.") < text.index("2x = 10") < text.index("Divide by 2.")
    assert text.endswith("x = 5")
    assert text.startswith("Step 1:")
