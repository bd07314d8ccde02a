"""Submission Routes — submit a question, advance through steps, read progress.

Invariants:
    - Routes hold no pipeline logic: they parse, call the controller, and map
    - An error result is re-raised so the global StepwiseError handler renders it
    - DELETE is idempotent (204 whether or not the id existed)

Design Decisions:
    - POST for advance: it changes server-side progression state
"""

import logging

from fastapi import APIRouter, Depends, Response, status

from stepwise.api.dependencies import get_controller
from stepwise.config import Settings, get_settings
from stepwise.schemas.submission import (
    AdvanceRequest,
    ProgressionResponse,
    SubmissionCreate,
)
from stepwise.services.progression_controller import (
    ProgressionController,
    ProgressionResult,
)

logger = logging.getLogger(__name__)
router = APIRouter(prefix="/api/v1/submissions", tags=["submissions"])


def _respond(result: ProgressionResult) -> ProgressionResponse:
    if result.error is not None:
        raise result.error
    return ProgressionResponse.from_result(result)


@router.post(
    "", response_model=ProgressionResponse,
    status_code=status.HTTP_201_CREATED,
)
async def create_submission(
    body: SubmissionCreate,
    controller: ProgressionController = Depends(get_controller),
    settings: Settings = Depends(get_settings),
):
    """Submit a question; returns the first step."""
    payload = body.to_file_payload(max_bytes=settings.file_max_bytes)
    result = await controller.submit(body.question, payload, body.submission_id)
    return _respond(result)


@router.post("/{submission_id}/advance", response_model=ProgressionResponse)
async def advance_submission(
    submission_id: str,
    body: AdvanceRequest | None = None,
    controller: ProgressionController = Depends(get_controller),
):
    """Reveal the next step, or the final verdict after the last one."""
    cursor = body.cursor if body else None
    result = await controller.advance(submission_id, cursor)
    return _respond(result)


@router.get("/{submission_id}", response_model=ProgressionResponse)
async def get_submission(
    submission_id: str,
    controller: ProgressionController = Depends(get_controller),
):
    """Everything delivered so far, including after a failed verification."""
    result = await controller.progress(submission_id)
    return _respond(result)


@router.delete("/{submission_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_submission(
    submission_id: str,
    controller: ProgressionController = Depends(get_controller),
):
    """Drop a submission from the cache."""
    await controller.invalidate(submission_id)
    return Response(status_code=status.HTTP_204_NO_CONTENT)
