"""API Dependencies — process-wide ProgressionController wiring.

Invariants:
    - One controller (and therefore one store, one lock map) per process
    - Tests replace get_controller through app.dependency_overrides

Design Decisions:
    - lru_cache singleton, same pattern as get_settings(): the in-memory store is
      only coherent inside a single-worker process
"""

from functools import lru_cache

from stepwise.config import get_settings
from stepwise.infrastructure.anthropic_client import ResilientAnthropicClient
from stepwise.infrastructure.submission_store import InMemorySubmissionStore
from stepwise.services.anthropic_oracles import AnthropicOracles
from stepwise.services.progression_controller import ProgressionController
from stepwise.services.step_generator import StepGenerator
from stepwise.services.text_corrector import TextCorrector
from stepwise.services.verifier import Verifier


@lru_cache
def get_controller() -> ProgressionController:
    settings = get_settings()
    client = ResilientAnthropicClient(
        api_key=settings.anthropic_api_key,
        max_retries=settings.anthropic_max_retries,
        base_delay_ms=settings.anthropic_base_delay_ms,
        max_delay_ms=settings.anthropic_max_delay_ms,
        timeout_seconds=settings.anthropic_timeout_seconds,
    )
    oracles = AnthropicOracles(
        client,
        generation_model=settings.generation_model,
        correction_model=settings.correction_model,
        verification_model=settings.verification_model,
        language=settings.correction_language,
        max_tokens=settings.oracle_max_tokens,
    )
    timeout = settings.oracle_timeout_seconds
    corrector = TextCorrector(oracles, timeout_seconds=timeout)
    return ProgressionController(
        store=InMemorySubmissionStore(ttl_seconds=settings.store_ttl_seconds),
        generator=StepGenerator(oracles, corrector, timeout_seconds=timeout),
        verifier=Verifier(oracles, corrector, timeout_seconds=timeout),
        question_min_length=settings.question_min_length,
        question_max_length=settings.question_max_length,
    )
