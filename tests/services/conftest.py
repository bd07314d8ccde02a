"""Service test fixtures — fake oracles wired into the real services.

Invariants:
    - Every test gets fresh fakes and a fresh in-memory store
    - The controller fixture uses the real TextCorrector, StepGenerator and Verifier;
      only the oracle boundary is faked
"""

import pytest

from stepwise.infrastructure.submission_store import InMemorySubmissionStore
from stepwise.services.progression_controller import ProgressionController
from stepwise.services.step_generator import StepGenerator
from stepwise.services.text_corrector import TextCorrector
from stepwise.services.verifier import Verifier

from tests.services.fake_oracles import (
    FakeCorrectionOracle,
    FakeGenerationOracle,
    FakeVerificationOracle,
)


@pytest.fixture
def generation_oracle():
    return FakeGenerationOracle()


@pytest.fixture
def correction_oracle():
    return FakeCorrectionOracle()


@pytest.fixture
def verification_oracle():
    return FakeVerificationOracle()


@pytest.fixture
def store():
    return InMemorySubmissionStore()


@pytest.fixture
def corrector(correction_oracle):
    return TextCorrector(correction_oracle, timeout_seconds=5)


@pytest.fixture
def controller(store, generation_oracle, verification_oracle, corrector):
    return ProgressionController(
        store=store,
        generator=StepGenerator(generation_oracle, corrector, timeout_seconds=5),
        verifier=Verifier(verification_oracle, corrector, timeout_seconds=5),
    )
