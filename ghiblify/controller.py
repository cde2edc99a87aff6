"""
Client-side generation lifecycle.

``GenerationRequestController`` sends one picked image to /api/generate and
keeps the state a UI needs to render: idle, submitting, succeeded (with the
image URL) or failed (with one readable sentence).
"""
import logging
from enum import Enum
from typing import Iterable, Optional, Tuple

import httpx

from .errors import NoFileSelected, SubmissionInProgress
from .intake import CandidateFile, ValidationOutcome, WidgetRejection, validate_selection

logger = logging.getLogger(__name__)

GENERATE_PATH = "/api/generate"
FORM_FIELD = "image"

CONNECTION_ERROR = "Failed to connect to the server. Please check your network connection."
UNEXPECTED_ERROR = "An unexpected error occurred."

# Raised before anything reaches the network
SETUP_ERRORS = (httpx.InvalidURL, httpx.UnsupportedProtocol, httpx.LocalProtocolError)


class GenerationState(str, Enum):
    IDLE = "idle"
    SUBMITTING = "submitting"
    SUCCEEDED = "succeeded"
    FAILED = "failed"


def _json_string(response: httpx.Response, key: str) -> Optional[str]:
    try:
        body = response.json()
    except ValueError:
        return None
    value = body.get(key) if isinstance(body, dict) else None
    return value if isinstance(value, str) and value else None


class GenerationRequestController:
    """
    Drives a single generation request at a time.

    A second ``submit`` while one is in flight raises SubmissionInProgress
    and leaves the running request alone.
    """

    def __init__(
        self,
        base_url: str = "",
        client: Optional[httpx.AsyncClient] = None,
        timeout: Optional[float] = None,
    ):
        """
        Args:
            base_url: Server root, e.g. 'http://127.0.0.1:8000'
            client: Shared AsyncClient; a short-lived one is opened per request otherwise
            timeout: Timeout for the short-lived client (None waits indefinitely)
        """
        self.base_url = base_url.rstrip("/")
        self.client = client
        self.timeout = timeout

        self.state = GenerationState.IDLE
        self.image_url: Optional[str] = None
        self.error: Optional[str] = None
        self.rejection_message: Optional[str] = None

    @property
    def loading(self) -> bool:
        return self.state is GenerationState.SUBMITTING

    async def select_files(
        self,
        files: Iterable[CandidateFile] = (),
        rejections: Iterable[WidgetRejection] = (),
    ) -> ValidationOutcome:
        """
        Validate a picker selection and submit it when accepted.

        A rejection only sets ``rejection_message``; the generation state
        and any previous result stay as they were.
        """
        outcome = validate_selection(files, rejections)
        if not outcome.accepted:
            self.rejection_message = outcome.message
            return outcome

        self.rejection_message = None
        await self.submit(outcome.file)
        return outcome

    async def submit(self, file: Optional[CandidateFile]) -> None:
        """
        Send ``file`` to the generation endpoint and record the outcome.

        Raises:
            NoFileSelected: ``file`` is None
            SubmissionInProgress: a request is already in flight
        """
        if file is None:
            raise NoFileSelected()
        if self.state is GenerationState.SUBMITTING:
            raise SubmissionInProgress()

        self.image_url = None
        self.error = None
        self.state = GenerationState.SUBMITTING

        image_url = None
        error = None
        try:
            response = await self._post(file)
            image_url, error = self._read_response(response)
        except SETUP_ERRORS as e:
            error = f"Request setup failed: {e}"
        except httpx.RequestError as e:
            logger.warning(f"No response from {self.base_url or 'server'}: {e!r}")
            error = CONNECTION_ERROR
        except Exception:
            logger.exception("Image generation failed")
            error = UNEXPECTED_ERROR
        finally:
            if image_url:
                self.image_url = image_url
                self.state = GenerationState.SUCCEEDED
            else:
                self.error = error or UNEXPECTED_ERROR
                self.state = GenerationState.FAILED

    async def _post(self, file: CandidateFile) -> httpx.Response:
        url = f"{self.base_url}{GENERATE_PATH}"
        files = {
            FORM_FIELD: (file.filename, file.content, file.content_type or "application/octet-stream")
        }

        if self.client is not None:
            return await self.client.post(url, files=files)

        async with httpx.AsyncClient(timeout=self.timeout) as client:
            return await client.post(url, files=files)

    @staticmethod
    def _read_response(response: httpx.Response) -> Tuple[Optional[str], Optional[str]]:
        """Return (image_url, error); exactly one is set."""
        if response.is_success:
            image_url = _json_string(response, "imageUrl")
            if image_url:
                return image_url, None
        else:
            message = _json_string(response, "error")
            if message:
                return None, message

        logger.error(f"Unusable response from generation endpoint: {response.status_code} {response.text[:200]}")
        return None, (
            f"Server error: {response.status_code} {response.reason_phrase}. Please try again later."
        )
