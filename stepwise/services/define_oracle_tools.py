"""Define Oracle Tools — Anthropic tool schemas that force structured oracle output.

Invariants:
    - Each oracle call forces exactly one tool (tool_choice type=tool)
    - input_schema mirrors the oracle's wire response shape field-for-field
    - Field names stay camelCase: they are the wire contract, not Python names

Design Decisions:
    - Forced tool use over "reply in JSON" prompting: the SDK hands back a parsed
      dict, no markdown-fence stripping or fallback parsing needed
"""

SUBMIT_SOLUTION_TOOL = {
    "name": "submit_solution",
    "description": (
        "Submit the ordered step-by-step solution to the question. "
        "Each step pairs a short verbal explanation with the formula or "
        "calculation performed in that step."
    ),
    "input_schema": {
        "type": "object",
        "properties": {
            "steps": {
                "type": "array",
                "minItems": 1,
                "items": {
                    "type": "object",
                    "properties": {
                        "stepNumber": {
                            "type": "integer",
                            "minimum": 1,
                            "description": "The step number in the solution process, starting at 1.",
                        },
                        "explanation": {
                            "type": "string",
                            "description": "The verbal explanation for this step.",
                        },
                        "formula": {
                            "type": "string",
                            "description": (
                                "The mathematical formula or calculation for this "
                                "step, formatted as a LaTeX string."
                            ),
                        },
                    },
                    "required": ["stepNumber", "explanation", "formula"],
                },
            },
        },
        "required": ["steps"],
    },
}

SUBMIT_CORRECTION_TOOL = {
    "name": "submit_correction",
    "description": "Submit the grammar and meaning check of the given text.",
    "input_schema": {
        "type": "object",
        "properties": {
            "correctedText": {
                "type": "string",
                "description": (
                    "The corrected text. If the original was already correct, "
                    "the original text unchanged."
                ),
            },
            "isCorrect": {
                "type": "boolean",
                "description": "Whether the original text was already grammatically correct and meaningful.",
            },
        },
        "required": ["correctedText", "isCorrect"],
    },
}

SUBMIT_VERIFICATION_TOOL = {
    "name": "submit_verification",
    "description": "Submit the verdict on whether the proposed solution is correct.",
    "input_schema": {
        "type": "object",
        "properties": {
            "isCorrect": {
                "type": "boolean",
                "description": "Whether the solution is correct.",
            },
            "verificationDetails": {
                "type": "string",
                "description": "Details of the verification process, including any errors found.",
            },
        },
        "required": ["isCorrect", "verificationDetails"],
    },
}


def forced(tool: dict) -> dict:
    """tool_choice that makes the model call `tool` and nothing else."""
    return {"type": "tool", "name": tool["name"]}
