"""
Ghiblify image editor clients.
"""
from ..config import Settings
from ..errors import ConfigurationError
from .azure import AzureEditor
from .base import BaseImageEditor, EditedImage, EditResult, UpstreamError
from .openai import OpenAIEditor


def get_editor(settings: Settings) -> BaseImageEditor:
    """
    Factory function to get the editor for the configured provider.

    Args:
        settings: Settings naming the provider ('openai' or 'azure')

    Returns:
        BaseImageEditor instance
    """
    provider = settings.provider.lower()
    if provider == "openai":
        return OpenAIEditor(
            api_key=settings.openai_api_key,
            base_url=settings.openai_base_url,
            model=settings.openai_model,
            timeout=settings.upstream_timeout,
        )
    elif provider == "azure":
        return AzureEditor(
            endpoint=settings.azure_endpoint,
            api_key=settings.azure_api_key,
            deployment=settings.azure_deployment,
            api_version=settings.azure_api_version,
            timeout=settings.upstream_timeout,
        )
    raise ConfigurationError(f"Unknown provider: {settings.provider}. Use 'openai' or 'azure'.")


__all__ = [
    "get_editor",
    "BaseImageEditor",
    "OpenAIEditor",
    "AzureEditor",
    "EditResult",
    "EditedImage",
    "UpstreamError",
]
