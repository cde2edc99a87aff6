"""
Generation Endpoint
Validates an uploaded image, forwards it to the image-edit service and
translates every outcome into the /api/generate response contract.
"""
import logging
from dataclasses import dataclass, field
from typing import Callable, Dict, Optional, Sequence

from .config import Settings
from .editors import BaseImageEditor, UpstreamError, get_editor
from .models import GenerateError, GenerateSuccess

logger = logging.getLogger(__name__)

MAX_FILE_SIZE_MB = 4
MAX_FILE_SIZE_BYTES = MAX_FILE_SIZE_MB * 1024 * 1024
ALLOWED_MIME_TYPES = ("image/png", "image/jpeg")
IMAGE_SIZE = "1024x1024"
GHIBLI_PROMPT = "A Studio Ghibli style rendering of the image"
BILLING_LIMIT_CODE = "billing_hard_limit_reached"

CONFIGURATION_ERROR = "Server configuration error. Cannot process request."
NO_FILE_ERROR = "No image file uploaded."
MULTIPLE_FILES_ERROR = "Please upload only one image."
INVALID_TYPE_ERROR = f"Invalid file type. Please upload {' or '.join(ALLOWED_MIME_TYPES)}."
TOO_LARGE_ERROR = f"Image file too large. Maximum size is {MAX_FILE_SIZE_MB}MB."
MISSING_URL_ERROR = "Failed to retrieve image URL from the generation service."
BILLING_LIMIT_ERROR = "Image generation failed: Billing limit reached."
UPSTREAM_BAD_REQUEST_ERROR = "Image generation failed: Invalid request data provided to upstream service."
FILE_PROCESSING_ERROR = "Failed to process uploaded image file."
UNEXPECTED_ERROR = "An unexpected server error occurred."


@dataclass
class UploadedImage:
    """An uploaded file as seen by the endpoint, independent of the web framework."""
    filename: Optional[str]
    content_type: Optional[str]
    size: int
    reader: Callable[[], bytes] = field(repr=False)

    def read(self) -> bytes:
        return self.reader()


@dataclass
class GenerationResponse:
    """Status, JSON body and headers to send back for one request."""
    status_code: int
    body: Dict[str, str]
    headers: Dict[str, str] = field(default_factory=dict)

    @classmethod
    def success(cls, image_url: str) -> "GenerationResponse":
        return cls(200, GenerateSuccess(image_url=image_url).model_dump(by_alias=True))

    @classmethod
    def failure(cls, message: str, status_code: int, headers: Optional[Dict[str, str]] = None) -> "GenerationResponse":
        return cls(status_code, GenerateError(error=message).model_dump(), headers or {})

    @property
    def image_url(self) -> Optional[str]:
        return self.body.get("imageUrl")

    @property
    def error(self) -> Optional[str]:
        return self.body.get("error")


class GenerationEndpoint:
    """
    Stateless handler behind POST /api/generate.

    Each call runs the checks in order (method, configuration, file count,
    type, size), calls the image editor once and returns a GenerationResponse.
    No exception escapes ``handle``.
    """

    def __init__(
        self,
        settings: Settings,
        editor_factory: Callable[[Settings], BaseImageEditor] = get_editor,
    ):
        """
        Initialize GenerationEndpoint.

        Args:
            settings: Configuration read once at startup
            editor_factory: Builds the image editor for a request
        """
        self.settings = settings
        self.editor_factory = editor_factory

    def handle(self, method: str, images: Sequence[UploadedImage]) -> GenerationResponse:
        """
        Process one request.

        Args:
            method: HTTP method of the request
            images: Files uploaded under the 'image' field

        Returns:
            GenerationResponse ready to be serialized
        """
        # 1. Method check
        if method != "POST":
            logger.warning(f"Rejected {method} request to the generation endpoint")
            return GenerationResponse.failure(
                f"Method {method} Not Allowed", 405, headers={"Allow": "POST"}
            )

        # 2. Upstream credentials
        missing = self.settings.missing_config()
        if missing:
            logger.error(f"Image editor is not configured. Missing: {', '.join(missing)}")
            return GenerationResponse.failure(CONFIGURATION_ERROR, 500)

        # 3. File validation
        if not images:
            logger.warning("Generation request without an image file")
            return GenerationResponse.failure(NO_FILE_ERROR, 400)

        if len(images) > 1:
            logger.warning(f"Generation request with {len(images)} image files")
            return GenerationResponse.failure(MULTIPLE_FILES_ERROR, 400)

        image = images[0]

        if not image.content_type or image.content_type not in ALLOWED_MIME_TYPES:
            logger.warning(f"Rejected upload {image.filename!r} with type {image.content_type!r}")
            return GenerationResponse.failure(INVALID_TYPE_ERROR, 400)

        if image.size > MAX_FILE_SIZE_BYTES:
            logger.warning(f"Rejected upload {image.filename!r} of {image.size} bytes")
            return GenerationResponse.failure(TOO_LARGE_ERROR, 400)

        # 4. Image editing
        try:
            image_data = image.read()
            editor = self.editor_factory(self.settings)
            result = editor.edit_image(
                image_data,
                image.filename or "image",
                image.content_type,
                GHIBLI_PROMPT,
                n=1,
                size=IMAGE_SIZE,
                response_format="url",
            )
        except OSError as e:
            logger.error(f"Could not read uploaded image {image.filename!r}: {e}")
            return GenerationResponse.failure(FILE_PROCESSING_ERROR, 500)
        except Exception:
            logger.exception("Error during image generation process")
            return GenerationResponse.failure(UNEXPECTED_ERROR, 500)

        if result.error is not None:
            return self._upstream_failure(result.error)

        image_url = result.image_url
        if not image_url:
            logger.error(f"Image edit response did not contain an image URL: {result.raw!r}")
            return GenerationResponse.failure(MISSING_URL_ERROR, 500)

        logger.info(f"Generated image for {image.filename!r}")
        return GenerationResponse.success(image_url)

    def _upstream_failure(self, error: UpstreamError) -> GenerationResponse:
        """Map an upstream failure to a safe message; only the status leaks through."""
        status_code = error.status_code or 500
        logger.error(
            f"Image edit service error: status={error.status_code} code={error.code} "
            f"type={error.type} message={error.message}"
        )

        if error.code == BILLING_LIMIT_CODE:
            message = BILLING_LIMIT_ERROR
        elif error.status_code == 400:
            message = UPSTREAM_BAD_REQUEST_ERROR
        else:
            message = f"Failed to generate image due to an upstream service error. (Status: {status_code})"

        return GenerationResponse.failure(message, status_code)
