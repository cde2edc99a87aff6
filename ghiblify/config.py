"""
Ghiblify configuration.

Settings are read from the environment once, in ``Settings.from_env()``, and
handed to ``create_app()``. The one exception is LOG_LEVEL, which
``ghiblify.main`` reads at import time for ``logging.basicConfig``.

Environment Variables:
    IMAGE_PROVIDER: 'openai' (default) or 'azure'
    OPENAI_API_KEY: OpenAI API key
    OPENAI_BASE_URL: OpenAI API base URL (default: https://api.openai.com/v1)
    OPENAI_IMAGE_MODEL: Model name (default: dall-e-2)
    AZURE_OPENAI_ENDPOINT: Azure OpenAI resource endpoint URL
    AZURE_OPENAI_API_KEY: Azure OpenAI API key
    AZURE_OPENAI_DEPLOYMENT: Image deployment name (default: dall-e-2)
    AZURE_OPENAI_API_VERSION: REST API version (default: 2024-02-01)
    UPSTREAM_TIMEOUT: Seconds to wait for the image service (default: no timeout)
"""
import os
from dataclasses import dataclass
from typing import ClassVar, List, Mapping, Optional, Tuple

from .errors import ConfigurationError


@dataclass(frozen=True)
class Settings:
    """Process-wide configuration for the generation endpoint."""

    # Environment variable names
    ENV_PROVIDER: ClassVar[str] = "IMAGE_PROVIDER"
    ENV_OPENAI_API_KEY: ClassVar[str] = "OPENAI_API_KEY"
    ENV_OPENAI_BASE_URL: ClassVar[str] = "OPENAI_BASE_URL"
    ENV_OPENAI_MODEL: ClassVar[str] = "OPENAI_IMAGE_MODEL"
    ENV_AZURE_ENDPOINT: ClassVar[str] = "AZURE_OPENAI_ENDPOINT"
    ENV_AZURE_API_KEY: ClassVar[str] = "AZURE_OPENAI_API_KEY"
    ENV_AZURE_DEPLOYMENT: ClassVar[str] = "AZURE_OPENAI_DEPLOYMENT"
    ENV_AZURE_API_VERSION: ClassVar[str] = "AZURE_OPENAI_API_VERSION"
    ENV_UPSTREAM_TIMEOUT: ClassVar[str] = "UPSTREAM_TIMEOUT"

    PROVIDERS: ClassVar[Tuple[str, ...]] = ("openai", "azure")

    DEFAULT_OPENAI_BASE_URL: ClassVar[str] = "https://api.openai.com/v1"
    DEFAULT_OPENAI_MODEL: ClassVar[str] = "dall-e-2"
    DEFAULT_AZURE_DEPLOYMENT: ClassVar[str] = "dall-e-2"
    DEFAULT_AZURE_API_VERSION: ClassVar[str] = "2024-02-01"

    provider: str = "openai"
    openai_api_key: Optional[str] = None
    openai_base_url: str = DEFAULT_OPENAI_BASE_URL
    openai_model: str = DEFAULT_OPENAI_MODEL
    azure_endpoint: Optional[str] = None
    azure_api_key: Optional[str] = None
    azure_deployment: str = DEFAULT_AZURE_DEPLOYMENT
    azure_api_version: str = DEFAULT_AZURE_API_VERSION
    upstream_timeout: Optional[float] = None

    def __post_init__(self):
        if self.provider not in self.PROVIDERS:
            raise ConfigurationError(
                f"Unknown provider: {self.provider}. Use one of: {', '.join(self.PROVIDERS)}."
            )

    @classmethod
    def from_env(cls, environ: Optional[Mapping[str, str]] = None) -> "Settings":
        """
        Build settings from environment variables.

        Args:
            environ: Mapping to read instead of ``os.environ``

        Raises:
            ConfigurationError: on an unknown provider or a malformed timeout
        """
        env = os.environ if environ is None else environ

        def get(name: str) -> Optional[str]:
            # Empty values count as unset
            value = env.get(name)
            return value.strip() if value and value.strip() else None

        timeout = get(cls.ENV_UPSTREAM_TIMEOUT)
        if timeout is not None:
            try:
                timeout = float(timeout)
            except ValueError:
                raise ConfigurationError(
                    f"{cls.ENV_UPSTREAM_TIMEOUT} must be a number of seconds, got {timeout!r}"
                ) from None

        return cls(
            provider=(get(cls.ENV_PROVIDER) or "openai").lower(),
            openai_api_key=get(cls.ENV_OPENAI_API_KEY),
            openai_base_url=get(cls.ENV_OPENAI_BASE_URL) or cls.DEFAULT_OPENAI_BASE_URL,
            openai_model=get(cls.ENV_OPENAI_MODEL) or cls.DEFAULT_OPENAI_MODEL,
            azure_endpoint=get(cls.ENV_AZURE_ENDPOINT),
            azure_api_key=get(cls.ENV_AZURE_API_KEY),
            azure_deployment=get(cls.ENV_AZURE_DEPLOYMENT) or cls.DEFAULT_AZURE_DEPLOYMENT,
            azure_api_version=get(cls.ENV_AZURE_API_VERSION) or cls.DEFAULT_AZURE_API_VERSION,
            upstream_timeout=timeout,
        )

    def missing_config(self) -> List[str]:
        """Return the environment variables the selected provider still needs."""
        missing = []
        if self.provider == "azure":
            if not self.azure_endpoint:
                missing.append(self.ENV_AZURE_ENDPOINT)
            if not self.azure_api_key:
                missing.append(self.ENV_AZURE_API_KEY)
        elif not self.openai_api_key:
            missing.append(self.ENV_OPENAI_API_KEY)
        return missing

    def is_configured(self) -> bool:
        return not self.missing_config()
