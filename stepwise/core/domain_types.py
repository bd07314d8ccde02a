"""Domain Types — rich types that replace bare primitives across the codebase.

Invariants:
    - SubmissionId wraps the opaque session token — never use a bare str in domain logic
    - The optional file payload is `None | FilePayload`, never a loose string
    - All valid states encoded as Enums — no raw string matching

Design Decisions:
    - NewType over dataclass wrappers: zero runtime cost, full type-checker support
    - str Enums: serialize to JSON without custom encoders
    - FilePayload keeps the base64 text as received: oracles want base64 anyway
"""

import base64
import binascii
import re
from dataclasses import dataclass
from enum import Enum
from typing import NewType

from stepwise.core.errors import ValidationError


# ─── Identity Types ──────────────────────────────────────────────

SubmissionId = NewType("SubmissionId", str)


# ─── Enums ───────────────────────────────────────────────────────

class ProgressionStatus(str, Enum):
    """Per-submission progression states. COMPLETE and ERROR are terminal."""
    INITIAL = "initial"
    STEP_BY_STEP = "step_by_step"
    COMPLETE = "complete"
    ERROR = "error"


class OracleKind(str, Enum):
    """The three external reasoning calls, for logs and error context."""
    GENERATION = "generation"
    CORRECTION = "correction"
    VERIFICATION = "verification"


# ─── File Payload ────────────────────────────────────────────────

# Images go to the oracle as-is; PDFs arrive either raw or already
# extracted to text/plain by the client.
SUPPORTED_MIME_TYPES = frozenset({
    "image/png",
    "image/jpeg",
    "image/webp",
    "image/gif",
    "application/pdf",
    "text/plain",
})

_DATA_URI = re.compile(r"^data:(?P<mime>[\w.+-]+/[\w.+-]+)(?:;[\w-]+=[\w-]+)*;base64,(?P<data>.*)$", re.DOTALL)


@dataclass(frozen=True)
class FilePayload:
    """Opaque, mime-typed, base64-encoded attachment for the generation oracle."""
    mime_type: str
    encoded_bytes: str

    @property
    def is_image(self) -> bool:
        return self.mime_type.startswith("image/")

    @property
    def size_bytes(self) -> int:
        """Decoded size, computed from the base64 length without decoding."""
        padding = self.encoded_bytes.count("=", -2)
        return (len(self.encoded_bytes) * 3) // 4 - padding

    def decoded_text(self) -> str:
        """Decode a text/plain payload. Undecodable bytes are replaced."""
        return base64.b64decode(self.encoded_bytes).decode("utf-8", errors="replace")

    def to_data_uri(self) -> str:
        return f"data:{self.mime_type};base64,{self.encoded_bytes}"

    @classmethod
    def from_data_uri(cls, uri: str, max_bytes: int | None = None) -> "FilePayload":
        """Parse `data:<mime>;base64,<payload>` into a FilePayload.

        Raises ValidationError on a malformed URI, an unsupported mime type,
        invalid base64, or a payload above max_bytes.
        """
        match = _DATA_URI.match(uri.strip())
        if not match:
            raise ValidationError(
                "File data must be a base64 data URI", field="file_data",
            )
        mime = match.group("mime").lower()
        if mime not in SUPPORTED_MIME_TYPES:
            raise ValidationError(
                f"Unsupported file type '{mime}'. Use an image (PNG, JPEG) or PDF.",
                field="file_data",
            )
        data = "".join(match.group("data").split())
        try:
            base64.b64decode(data, validate=True)
        except (binascii.Error, ValueError):
            raise ValidationError("File data is not valid base64", field="file_data")
        payload = cls(mime_type=mime, encoded_bytes=data)
        if max_bytes is not None and payload.size_bytes > max_bytes:
            raise ValidationError(
                f"File is larger than {max_bytes} bytes", field="file_data",
            )
        return payload
