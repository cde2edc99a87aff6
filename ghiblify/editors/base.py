"""
Base image editor for Ghiblify.

Editors wrap an upstream image-edit API. They never raise on upstream or
network failures; every outcome comes back as an ``EditResult``.
"""
import logging
import time
from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional

import requests

logger = logging.getLogger(__name__)


@dataclass
class UpstreamError:
    """Failure reported by the image-edit service, or met while reaching it."""
    status_code: Optional[int] = None
    code: Optional[str] = None
    type: Optional[str] = None
    message: str = ""


@dataclass
class EditedImage:
    """One item of an image-edit result."""
    url: Optional[str] = None


@dataclass
class EditResult:
    """Result from an image-edit request."""
    images: List[EditedImage] = field(default_factory=list)
    error: Optional[UpstreamError] = None
    # Decoded payload (or text excerpt) kept for diagnostics
    raw: Any = None

    @property
    def image_url(self) -> Optional[str]:
        """URL of the first image, if the service returned one."""
        if self.images and self.images[0].url:
            return self.images[0].url
        return None


def parse_edit_payload(payload: Any) -> EditResult:
    """Turn a successful JSON body (``{"data": [{"url": ...}]}``) into an EditResult."""
    images = []
    data = payload.get("data") if isinstance(payload, dict) else None
    if isinstance(data, list):
        for item in data:
            url = item.get("url") if isinstance(item, dict) else None
            images.append(EditedImage(url=url if isinstance(url, str) else None))
    return EditResult(images=images, raw=payload)


def error_from_response(response: requests.Response) -> UpstreamError:
    """
    Build an UpstreamError from a non-2xx response.

    OpenAI-style services answer with ``{"error": {"message", "type", "code"}}``;
    anything else keeps only the status and a text excerpt.
    """
    try:
        body = response.json()
    except ValueError:
        body = None

    details = body.get("error") if isinstance(body, dict) else None
    if isinstance(details, dict):
        return UpstreamError(
            status_code=response.status_code,
            code=details.get("code"),
            type=details.get("type"),
            message=details.get("message") or "",
        )
    return UpstreamError(status_code=response.status_code, message=response.text[:500])


class BaseImageEditor:
    """Abstract base class for image editors."""

    name = "base"

    def __init__(self, timeout: Optional[float] = None):
        self.timeout = timeout

    def is_configured(self) -> bool:
        raise NotImplementedError("Subclasses must implement is_configured")

    def edit_image(
        self,
        image_data: bytes,
        filename: str,
        content_type: str,
        prompt: str,
        n: int = 1,
        size: str = "1024x1024",
        response_format: str = "url",
    ) -> EditResult:
        """
        Submit an image and an instruction, return the edited image(s).
        Must be implemented by subclasses.

        Args:
            image_data: Input image as bytes
            filename: Original filename
            content_type: Declared media type of the image
            prompt: Edit instruction
            n: Number of images to request
            size: Output resolution, e.g. '1024x1024'
            response_format: 'url' or 'b64_json'

        Returns:
            EditResult with the returned items or an UpstreamError
        """
        raise NotImplementedError("Subclasses must implement edit_image")

    def _post_edit(
        self,
        url: str,
        headers: Dict[str, str],
        image_data: bytes,
        filename: str,
        content_type: str,
        data: Dict[str, Any],
        params: Optional[Dict[str, str]] = None,
    ) -> EditResult:
        """POST a multipart edit request and decode the outcome."""
        files = {
            "image": (filename or "image.png", image_data, content_type)
        }

        start_time = time.time()
        try:
            response = requests.post(
                url, headers=headers, params=params, files=files, data=data, timeout=self.timeout
            )
        except requests.exceptions.RequestException as e:
            logger.error(f"{self.name} image edit request failed: {e}")
            return EditResult(error=UpstreamError(type="connection_error", message=str(e)))

        latency = time.time() - start_time
        logger.info(f"{self.name} responded with {response.status_code} in {latency:.2f}s")

        if not response.ok:
            error = error_from_response(response)
            logger.error(
                f"{self.name} API Error: status={error.status_code} code={error.code} "
                f"type={error.type} message={error.message}"
            )
            return EditResult(error=error)

        try:
            payload = response.json()
        except ValueError:
            logger.error(f"{self.name} returned a non-JSON body: {response.text[:200]}")
            return EditResult(raw=response.text[:500])

        return parse_edit_payload(payload)
