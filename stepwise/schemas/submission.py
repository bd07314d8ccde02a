"""Submission Schemas — Pydantic models for the submit/advance HTTP contract.

Invariants:
    - JSON keys are camelCase on the wire (submissionId, totalSteps, fileData);
      snake_case names are accepted on input too
    - fileData is a base64 data URI; parsing/size checks delegate to FilePayload
    - Question length is checked by the controller (settings-driven), only the
      hard upper bound lives here

Design Decisions:
    - from_result() maps the controller's ProgressionResult, keeping routes thin
"""

from pydantic import BaseModel, ConfigDict, Field, field_validator
from pydantic.alias_generators import to_camel

from stepwise.core.domain_types import FilePayload, ProgressionStatus
from stepwise.core.solution import SolutionStep, VerificationResult


class _CamelModel(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class SubmissionCreate(_CamelModel):
    """Submit a question with an optional attached file."""
    question: str = Field(max_length=20_000)
    file_data: str | None = None
    submission_id: str | None = Field(None, pattern=r"^[A-Za-z0-9_-]{8,128}$")

    @field_validator("file_data")
    @classmethod
    def blank_file_is_none(cls, v: str | None) -> str | None:
        """The terminal form posts an empty hidden field when no file is attached."""
        if v is not None and not v.strip():
            return None
        return v

    def to_file_payload(self, max_bytes: int | None = None) -> FilePayload | None:
        if self.file_data is None:
            return None
        return FilePayload.from_data_uri(self.file_data, max_bytes=max_bytes)


class AdvanceRequest(_CamelModel):
    """Request the next step. cursor = last index the client has shown."""
    cursor: int | None = Field(None, ge=0)


class StepResponse(_CamelModel):
    step_number: int
    explanation: str
    formula: str

    @classmethod
    def from_step(cls, step: SolutionStep) -> "StepResponse":
        return cls(
            step_number=step.step_number,
            explanation=step.explanation,
            formula=step.formula,
        )


class VerificationResponse(_CamelModel):
    is_correct: bool
    verification_details: str

    @classmethod
    def from_result(cls, result: VerificationResult) -> "VerificationResponse":
        return cls(
            is_correct=result.is_correct,
            verification_details=result.verification_details,
        )


class ProgressionResponse(_CamelModel):
    """Public view of a submission after submit, advance, or a progress read."""
    status: ProgressionStatus
    submission_id: str
    question: str | None = None
    step_index: int | None = None
    total_steps: int | None = None
    step: StepResponse | None = None
    delivered_steps: list[StepResponse] = Field(default_factory=list)
    verification: VerificationResponse | None = None
    replayed: bool = False

    @classmethod
    def from_result(cls, result) -> "ProgressionResponse":
        return cls(
            status=result.status,
            submission_id=result.submission_id,
            question=result.question,
            step_index=result.step_index,
            total_steps=result.total_steps,
            step=StepResponse.from_step(result.step) if result.step else None,
            delivered_steps=[StepResponse.from_step(s) for s in result.delivered_steps],
            verification=(
                VerificationResponse.from_result(result.verification)
                if result.verification else None
            ),
            replayed=result.replayed,
        )
