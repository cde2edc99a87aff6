"""
File intake checks run before anything is sent to the server.

The browser limits are looser than the server's on purpose: webp and files
between 4MB and 5MB pass here and are turned down by /api/generate.
"""
import logging
import mimetypes
from dataclasses import dataclass, field
from enum import Enum
from pathlib import Path
from typing import Dict, Iterable, Optional, Tuple, Union

logger = logging.getLogger(__name__)

ALLOWED_MIME_TYPES = ("image/jpeg", "image/png", "image/webp")
ACCEPTED_EXTENSIONS = {
    "image/jpeg": (".jpg", ".jpeg"),
    "image/png": (".png",),
    "image/webp": (".webp",),
}
MAX_FILE_SIZE_MB = 5
MAX_FILE_SIZE_BYTES = MAX_FILE_SIZE_MB * 1024 * 1024


class RejectionReason(str, Enum):
    INVALID_TYPE = "invalid-type"
    TOO_LARGE = "too-large"
    TOO_MANY_FILES = "too-many-files"
    OTHER = "other"


# First detected wins
EVALUATION_ORDER = (
    RejectionReason.TOO_MANY_FILES,
    RejectionReason.INVALID_TYPE,
    RejectionReason.TOO_LARGE,
    RejectionReason.OTHER,
)

# File picker error codes; anything not listed is OTHER
WIDGET_CODES: Dict[str, RejectionReason] = {
    "file-invalid-type": RejectionReason.INVALID_TYPE,
    "file-too-large": RejectionReason.TOO_LARGE,
    "too-many-files": RejectionReason.TOO_MANY_FILES,
}

REJECTION_MESSAGES = {
    RejectionReason.INVALID_TYPE: "Invalid file type. Please upload a JPG, PNG, or WEBP image.",
    RejectionReason.TOO_LARGE: f"File is too large. Maximum size is {MAX_FILE_SIZE_MB}MB.",
    RejectionReason.TOO_MANY_FILES: "Please upload only one file at a time.",
    RejectionReason.OTHER: "File selection failed. Please try again.",
}
NO_FILE_MESSAGE = "Please select an image file first."


@dataclass(frozen=True)
class CandidateFile:
    """A file the user picked, before it is accepted."""
    filename: str
    content_type: Optional[str]
    content: bytes = field(default=b"", repr=False)

    @property
    def size(self) -> int:
        return len(self.content)

    @classmethod
    def from_path(cls, path: Union[str, Path]) -> "CandidateFile":
        """Read a file from disk, guessing its media type from the extension."""
        path = Path(path)
        content_type, _ = mimetypes.guess_type(path.name)
        return cls(filename=path.name, content_type=content_type, content=path.read_bytes())


@dataclass(frozen=True)
class WidgetError:
    code: str
    message: str = ""


@dataclass(frozen=True)
class WidgetRejection:
    """A file the picker already turned down, with its error codes."""
    file: CandidateFile
    errors: Tuple[WidgetError, ...] = ()


@dataclass(frozen=True)
class Accepted:
    file: CandidateFile

    @property
    def accepted(self) -> bool:
        return True


@dataclass(frozen=True)
class Rejected:
    reason: RejectionReason
    message: str

    @property
    def accepted(self) -> bool:
        return False


ValidationOutcome = Union[Accepted, Rejected]


def reason_for_code(code: str) -> RejectionReason:
    return WIDGET_CODES.get(code, RejectionReason.OTHER)


def _reject(reason: RejectionReason, detail: str = "") -> Rejected:
    if reason is RejectionReason.OTHER and detail:
        return Rejected(reason, f"Error: {detail}")
    return Rejected(reason, REJECTION_MESSAGES[reason])


def validate_selection(
    files: Iterable[CandidateFile] = (),
    rejections: Iterable[WidgetRejection] = (),
) -> ValidationOutcome:
    """
    Classify a selection as accepted or rejected.

    Args:
        files: Files the picker accepted
        rejections: Files the picker rejected, with its error codes

    Returns:
        Accepted with the single file, or Rejected with the first reason
        found in EVALUATION_ORDER
    """
    files = list(files)
    rejections = list(rejections)

    total = len(files) + len(rejections)
    if total == 0:
        return Rejected(RejectionReason.OTHER, NO_FILE_MESSAGE)
    if total > 1:
        logger.debug(f"Selection rejected: {total} files")
        return _reject(RejectionReason.TOO_MANY_FILES)

    if files:
        candidate, widget_errors, pre_rejected = files[0], (), False
    else:
        candidate, widget_errors, pre_rejected = rejections[0].file, rejections[0].errors, True

    # reason -> detail message reported by the picker
    found: Dict[RejectionReason, str] = {}
    for error in widget_errors:
        found.setdefault(reason_for_code(error.code), error.message)

    if candidate.content_type not in ALLOWED_MIME_TYPES:
        found.setdefault(RejectionReason.INVALID_TYPE, "")
    if candidate.size > MAX_FILE_SIZE_BYTES:
        found.setdefault(RejectionReason.TOO_LARGE, "")
    if pre_rejected and not found:
        found[RejectionReason.OTHER] = ""

    for reason in EVALUATION_ORDER:
        if reason in found:
            logger.debug(
                f"File rejected ({reason.value}): {candidate.filename} "
                f"type={candidate.content_type} size={candidate.size}"
            )
            return _reject(reason, found[reason])

    return Accepted(candidate)
