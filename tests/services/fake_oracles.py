"""Fake Oracles — scripted stand-ins for the three oracle Protocols.

Invariants:
    - Every call is recorded in .calls (in order) before any delay or error
    - FakeCorrectionOracle rewrites only texts listed in `fixes`; everything
      else is judged correct and echoed back
    - `gate` (asyncio.Event) lets a test hold a call open to force overlap

Design Decisions:
    - Flat classes, no inheritance: simple, explicit, easy to debug
"""

import asyncio


def solution_payload(*steps):
    """Build a generation oracle response from (explanation, formula) pairs."""
    return {
        "steps": [
            {"stepNumber": i, "explanation": explanation, "formula": formula}
            for i, (explanation, formula) in enumerate(steps, start=1)
        ],
    }


LINEAR_EQUATION = solution_payload(
    ("Subtract 5 from both sides.", r"2x + 5 - 5 = 15 - 5"),
    ("Simplify both sides.", r"2x = 10"),
    ("Divide both sides by 2.", r"x = \frac{10}{2} = 5"),
)


class FakeGenerationOracle:

    def __init__(self, response=None, error=None, gate=None):
        self.response = LINEAR_EQUATION if response is None else response
        self.error = error
        self.gate = gate
        self.calls = []

    async def generate(self, question, file_payload):
        self.calls.append({"question": question, "file_payload": file_payload})
        if self.gate is not None:
            await self.gate.wait()
        if self.error is not None:
            raise self.error
        return self.response


class FakeCorrectionOracle:

    def __init__(self, fixes=None, error=None):
        self.fixes = fixes or {}
        self.error = error
        self.calls = []

    async def correct(self, text):
        self.calls.append(text)
        if self.error is not None:
            raise self.error
        if text in self.fixes:
            return {"correctedText": self.fixes[text], "isCorrect": False}
        return {"correctedText": text, "isCorrect": True}


class FakeVerificationOracle:

    def __init__(self, response=None, error=None, gate=None):
        self.response = response or {
            "isCorrect": True,
            "verificationDetails": "Substituting x = 5 gives 2(5) + 5 = 15.",
        }
        self.error = error
        self.gate = gate
        self.calls = []

    async def verify(self, question, solution_text):
        self.calls.append({"question": question, "solution_text": solution_text})
        if self.gate is not None:
            await self.gate.wait()
        if self.error is not None:
            raise self.error
        return self.response


async def settle():
    """Let every ready task run until it blocks again."""
    for _ in range(5):
        await asyncio.sleep(0)
