"""Assistant configuration with environment variable loading.

Pydantic-based configuration for the OpenAI Assistants gateway and the
chat service built on top of it.
"""

import os
from pathlib import Path

from dotenv import load_dotenv
from pydantic import BaseModel, ConfigDict, Field, field_validator

# Load environment variables from .env file
load_dotenv()


def _env_value(name: str, default: str | None = None) -> str | None:
    # Raw text; the field type and constraints do the parsing
    value = os.getenv(name, "").strip()
    return value or default


def _env_flag(name: str) -> bool:
    return os.getenv(name, "").strip().lower() in {"1", "true", "yes", "on"}


class GatewayConfig(BaseModel):
    """Credentials for the OpenAI API.

    Attributes:
        api_key: API key for the OpenAI account that owns the assistant.
        base_url: API base URL (None for OpenAI default).
    """

    # Environment-derived defaults must pass the same checks as explicit values
    model_config = ConfigDict(validate_default=True)

    api_key: str = Field(
        default_factory=lambda: os.getenv("OPENAI_API_KEY", ""),
        description="OpenAI API key",
    )
    base_url: str | None = Field(
        default_factory=lambda: os.getenv("OPENAI_BASE_URL") or None,
        description="API base URL (None for OpenAI default)",
    )

    @field_validator("api_key")
    @classmethod
    def validate_api_key(cls, v: str) -> str:
        """Validate that API key is provided and non-empty."""
        if not v or not v.strip():
            raise ValueError("OPENAI_API_KEY is required. Set it in .env")
        return v.strip()


class AssistantConfig(GatewayConfig):
    """Configuration for the chat service.

    Attributes:
        assistant_id: Identifier of the pre-created assistant runs execute under.
        poll_interval: Seconds between run status checks.
        run_timeout: Seconds to wait for a run before giving up (None waits forever).
        upload_dir: Scratch directory for staged uploads.
        max_upload_size: Largest accepted upload in bytes.
        serialize_turns: Queue concurrent turns on the same thread.
    """

    assistant_id: str = Field(
        default_factory=lambda: os.getenv("OPENAI_ASSISTANT_ID", ""),
        description="Assistant that runs are created under",
    )
    poll_interval: float = Field(
        default_factory=lambda: _env_value("RUN_POLL_INTERVAL", "1.0"),
        gt=0.0,
        description="Seconds between run status polls",
    )
    run_timeout: float | None = Field(
        default_factory=lambda: _env_value("RUN_TIMEOUT_SECONDS"),
        gt=0.0,
        description="Upper bound on a single run wait (None for no limit)",
    )
    upload_dir: Path = Field(
        default_factory=lambda: Path(os.getenv("UPLOAD_DIR", "uploads")),
        description="Staging directory for incoming uploads",
    )
    max_upload_size: int = Field(
        default_factory=lambda: int(float(os.getenv("MAX_UPLOAD_MB", "50")) * 1024 * 1024),
        ge=1,
        description="Maximum upload size in bytes",
    )
    serialize_turns: bool = Field(
        default_factory=lambda: _env_flag("SERIALIZE_THREAD_TURNS"),
        description="Allow only one in-flight turn per thread",
    )

    @field_validator("assistant_id")
    @classmethod
    def validate_assistant_id(cls, v: str) -> str:
        """Validate that the assistant identity is configured."""
        if not v or not v.strip():
            raise ValueError(
                "OPENAI_ASSISTANT_ID is required. Run pdfchat-create-assistant to create one"
            )
        return v.strip()


def get_gateway_config() -> GatewayConfig:
    """Create gateway configuration from environment.

    Raises:
        ValidationError: If no API key is set.
    """
    return GatewayConfig()


def get_assistant_config() -> AssistantConfig:
    """Create chat service configuration from environment.

    Returns:
        Configured AssistantConfig instance.

    Raises:
        ValidationError: If the API key or assistant id is missing.
    """
    return AssistantConfig()
