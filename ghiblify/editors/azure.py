"""
Azure OpenAI image editor.
Uses an Azure OpenAI image deployment for the edit call.

Required Settings:
    azure_endpoint: Azure OpenAI resource endpoint URL
    azure_api_key: Azure OpenAI API key
    azure_deployment: Image model deployment name
"""
import logging
from typing import List, Optional

from ..errors import ConfigurationError
from .base import BaseImageEditor, EditResult

logger = logging.getLogger(__name__)


class AzureEditor(BaseImageEditor):
    """Azure OpenAI image editor."""

    name = "Azure OpenAI"

    def __init__(
        self,
        endpoint: Optional[str],
        api_key: Optional[str],
        deployment: str,
        api_version: str,
        timeout: Optional[float] = None,
    ):
        super().__init__(timeout=timeout)
        self.endpoint = endpoint.rstrip("/") if endpoint else None
        self.api_key = api_key
        self.deployment = deployment
        self.api_version = api_version

    @property
    def url(self) -> str:
        return f"{self.endpoint}/openai/deployments/{self.deployment}/images/edits"

    def is_configured(self) -> bool:
        """Check if Azure editor is properly configured."""
        return bool(self.endpoint and self.api_key)

    def get_missing_config(self) -> List[str]:
        """Return list of missing configuration values."""
        missing = []
        if not self.endpoint:
            missing.append("endpoint")
        if not self.api_key:
            missing.append("api_key")
        return missing

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
        """Edit an image with an Azure OpenAI deployment."""
        if not self.is_configured():
            missing = self.get_missing_config()
            raise ConfigurationError(f"Azure editor is missing: {', '.join(missing)}")

        logger.info(f"Using Azure Endpoint: {self.endpoint}")
        logger.info(f"Using Deployment: {self.deployment}")

        # Azure OpenAI authenticates with the api-key header
        headers = {
            "api-key": self.api_key
        }

        data = {
            "prompt": prompt,
            "n": n,
            "size": size,
            "response_format": response_format,
        }

        return self._post_edit(
            self.url,
            headers,
            image_data,
            filename,
            content_type,
            data,
            params={"api-version": self.api_version},
        )
