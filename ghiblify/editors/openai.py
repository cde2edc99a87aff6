"""
OpenAI image editor.
Uses the OpenAI Images API edit endpoint (``POST /images/edits``).
"""
import logging
from typing import Optional

from ..errors import ConfigurationError
from .base import BaseImageEditor, EditResult

logger = logging.getLogger(__name__)


class OpenAIEditor(BaseImageEditor):
    """OpenAI image editor using DALL-E."""

    name = "OpenAI"

    DEFAULT_BASE_URL = "https://api.openai.com/v1"
    DEFAULT_MODEL = "dall-e-2"

    def __init__(
        self,
        api_key: Optional[str],
        base_url: str = DEFAULT_BASE_URL,
        model: str = DEFAULT_MODEL,
        timeout: Optional[float] = None,
    ):
        super().__init__(timeout=timeout)
        self.api_key = api_key
        self.base_url = base_url.rstrip("/")
        self.model = model

    @property
    def endpoint(self) -> str:
        return f"{self.base_url}/images/edits"

    def is_configured(self) -> bool:
        """Check if the OpenAI editor has a key."""
        return bool(self.api_key)

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
        """Edit an image with the OpenAI Images API."""
        if not self.is_configured():
            raise ConfigurationError("OPENAI_API_KEY must be set.")

        headers = {
            "Authorization": f"Bearer {self.api_key}"
        }

        data = {
            "model": self.model,
            "prompt": prompt,
            "n": n,
            "size": size,
            "response_format": response_format,
        }

        logger.info(f"Submitting OpenAI image edit for {filename} (model={self.model}, size={size})")
        return self._post_edit(self.endpoint, headers, image_data, filename, content_type, data)
