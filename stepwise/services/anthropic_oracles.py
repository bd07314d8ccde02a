"""Anthropic Oracles — generation, correction, and verification backed by Claude.

Invariants:
    - One API call per oracle invocation (transport retries live in the client)
    - Output read only from the forced tool_use block; plain text is ignored
    - A response without the tool block: generation returns None (no steps),
      correction and verification raise OracleError("malformed_response")

Design Decisions:
    - One class satisfying all three oracle Protocols: shares the client, language,
      and token budget, while each method keeps its own model
    - ErrorContext.oracle set per call so transport logs say which oracle failed
"""

import logging
from typing import Any

from stepwise.core.domain_types import FilePayload, OracleKind
from stepwise.core.errors import ErrorContext, OracleError
from stepwise.infrastructure.anthropic_client import ResilientAnthropicClient
from stepwise.services.define_oracle_tools import (
    SUBMIT_CORRECTION_TOOL,
    SUBMIT_SOLUTION_TOOL,
    SUBMIT_VERIFICATION_TOOL,
    forced,
)
from stepwise.services.oracle_prompts import (
    build_correction_content,
    build_correction_system,
    build_generation_content,
    build_generation_system,
    build_verification_content,
    build_verification_system,
)

logger = logging.getLogger(__name__)


class AnthropicOracles:
    """Implements GenerationOracle, CorrectionOracle and VerificationOracle."""

    def __init__(
        self,
        client: ResilientAnthropicClient,
        generation_model: str,
        correction_model: str,
        verification_model: str,
        language: str = "Turkish",
        max_tokens: int = 4096,
    ) -> None:
        self.client = client
        self.generation_model = generation_model
        self.correction_model = correction_model
        self.verification_model = verification_model
        self.language = language
        self.max_tokens = max_tokens

    async def generate(
        self, question: str, file_payload: FilePayload | None,
    ) -> dict[str, Any] | None:
        response = await self.client.create_message(
            model=self.generation_model,
            max_tokens=self.max_tokens,
            system=build_generation_system(self.language),
            messages=[{
                "role": "user",
                "content": build_generation_content(question, file_payload),
            }],
            tools=[SUBMIT_SOLUTION_TOOL],
            tool_choice=forced(SUBMIT_SOLUTION_TOOL),
            context=ErrorContext(oracle=OracleKind.GENERATION.value),
        )
        return _tool_input(response, SUBMIT_SOLUTION_TOOL["name"])

    async def correct(self, text: str) -> dict[str, Any]:
        response = await self.client.create_message(
            model=self.correction_model,
            max_tokens=self.max_tokens,
            system=build_correction_system(self.language),
            messages=[{"role": "user", "content": build_correction_content(text)}],
            tools=[SUBMIT_CORRECTION_TOOL],
            tool_choice=forced(SUBMIT_CORRECTION_TOOL),
            context=ErrorContext(oracle=OracleKind.CORRECTION.value),
        )
        return _require_tool_input(response, SUBMIT_CORRECTION_TOOL["name"], OracleKind.CORRECTION)

    async def verify(self, question: str, solution_text: str) -> dict[str, Any]:
        response = await self.client.create_message(
            model=self.verification_model,
            max_tokens=self.max_tokens,
            system=build_verification_system(self.language),
            messages=[{
                "role": "user",
                "content": build_verification_content(question, solution_text),
            }],
            tools=[SUBMIT_VERIFICATION_TOOL],
            tool_choice=forced(SUBMIT_VERIFICATION_TOOL),
            context=ErrorContext(oracle=OracleKind.VERIFICATION.value),
        )
        return _require_tool_input(
            response, SUBMIT_VERIFICATION_TOOL["name"], OracleKind.VERIFICATION,
        )


def _tool_input(response: object, tool_name: str) -> dict[str, Any] | None:
    """Input dict of the first tool_use block named tool_name, else None."""
    for block in getattr(response, "content", None) or []:
        if getattr(block, "type", None) == "tool_use" and getattr(block, "name", None) == tool_name:
            data = getattr(block, "input", None)
            if isinstance(data, dict):
                return data
    return None


def _require_tool_input(response: object, tool_name: str, oracle: OracleKind) -> dict[str, Any]:
    data = _tool_input(response, tool_name)
    if data is None:
        logger.warning(
            "Oracle replied without %s", tool_name, extra={"oracle": oracle.value},
        )
        raise OracleError(
            f"{oracle.value} oracle returned no structured output",
            "malformed_response",
            context=ErrorContext(oracle=oracle.value),
        )
    return data
