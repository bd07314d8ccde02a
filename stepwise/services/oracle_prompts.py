"""Oracle Prompts — system prompts and user messages for the three oracle calls.

Invariants:
    - Prompts only describe the task; output shape is enforced by the forced tool
    - The file payload is attached as a content block, never inlined as base64 text
    - text/plain payloads (client-extracted PDF text) are decoded and quoted

Design Decisions:
    - Language is a parameter: explanations are written in, and checked against,
      the configured correction language
"""

from stepwise.core.domain_types import FilePayload

TARGET_STEP_COUNT = 3

_GENERATION_PROMPT = """<role>
You are an expert mathematics solver who specializes in explaining answers step by step.
</role>

<rules>
1. Solve the user's question. If a file is attached, read the problem from it.
2. Split the solution into exactly {step_count} steps unless the problem truly needs a different number.
3. Each step has a short explanation in {language} and one LaTeX formula (no $ delimiters).
4. Number steps from 1 without gaps.
5. Call submit_solution with the steps. Do not answer in plain text.
</rules>"""

_CORRECTION_PROMPT = """<role>
You are a {language} language expert.
</role>

<rules>
1. Check the given text for grammar and meaning.
2. If there are errors, fix them and return the best version in correctedText.
3. If the original is already correct, return it unchanged in correctedText.
4. Set isCorrect to whether the original text was correct to begin with.
5. Keep mathematical notation and numbers exactly as they are.
6. Call submit_correction. Do not answer in plain text.
</rules>"""

_VERIFICATION_PROMPT = """<role>
You are an expert mathematical solution checker.
</role>

<rules>
1. You are given a question and a proposed solution. Verify the solution independently.
2. Give a detailed breakdown of the verification in {language}, naming any error you find.
3. Call submit_verification with your verdict. Do not answer in plain text.
</rules>"""


def build_generation_system(language: str, step_count: int = TARGET_STEP_COUNT) -> str:
    return _GENERATION_PROMPT.format(language=language, step_count=step_count)


def build_correction_system(language: str) -> str:
    return _CORRECTION_PROMPT.format(language=language)


def build_verification_system(language: str) -> str:
    return _VERIFICATION_PROMPT.format(language=language)


def build_generation_content(question: str, file_payload: FilePayload | None) -> list[dict]:
    """User message content blocks: optional attachment first, then the question."""
    blocks: list[dict] = []
    if file_payload is not None:
        if file_payload.is_image:
            blocks.append({
                "type": "image",
                "source": {
                    "type": "base64",
                    "media_type": file_payload.mime_type,
                    "data": file_payload.encoded_bytes,
                },
            })
        elif file_payload.mime_type == "application/pdf":
            blocks.append({
                "type": "document",
                "source": {
                    "type": "base64",
                    "media_type": "application/pdf",
                    "data": file_payload.encoded_bytes,
                },
            })
        else:
            blocks.append({
                "type": "text",
                "text": f"<attached_file>\n{file_payload.decoded_text()}\n</attached_file>",
            })
    blocks.append({"type": "text", "text": f"Question: {question}"})
    return blocks


def build_correction_content(text: str) -> str:
    return f"Text to check:\n<text>\n{text}\n</text>"


def build_verification_content(question: str, solution_text: str) -> str:
    return (
        f"Question: {question}\n\n"
        f"Solution:\n<solution>\n{solution_text}\n</solution>"
    )
