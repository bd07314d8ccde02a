"""API test fixtures — FastAPI app over a controller wired to fake oracles.

Invariants:
    - get_controller overridden per test; the override is always removed
    - No lifespan run: logging setup is irrelevant to route behavior
"""

import pytest
from httpx import ASGITransport, AsyncClient

from stepwise.api.dependencies import get_controller
from stepwise.infrastructure.submission_store import InMemorySubmissionStore
from stepwise.main import app
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
def verification_oracle():
    return FakeVerificationOracle()


@pytest.fixture
def controller(generation_oracle, verification_oracle):
    corrector = TextCorrector(FakeCorrectionOracle())
    return ProgressionController(
        store=InMemorySubmissionStore(),
        generator=StepGenerator(generation_oracle, corrector),
        verifier=Verifier(verification_oracle, corrector),
    )


@pytest.fixture
async def client(controller):
    app.dependency_overrides[get_controller] = lambda: controller
    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as ac:
        yield ac
    app.dependency_overrides.clear()
