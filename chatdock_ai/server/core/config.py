"""
Configuration Settings.

This module defines the application configuration using Pydantic's BaseSettings.
It automatically loads all configuration from environment variables and .env file
without explicit dotenv loading.
"""

from pathlib import Path

from pydantic import BaseModel, Field
from pydantic_settings import BaseSettings, SettingsConfigDict

DEFAULT_SYSTEM_PROMPT = (
    "You are ChatDock, a local assistant with access to the user's machine through tools. "
    "Use a tool whenever the request needs one, and answer concisely once you have the result."
)

DEFAULT_HEARTBEAT_PROMPT = (
    "Perform a routine check-in. Check if there are any pending tasks, reminders, or updates to share."
)

# =====================================================================
# Grouped Configuration Models
# =====================================================================


class LLMConfig(BaseModel):
    """LLM backend (Ollama-compatible chat endpoint) configuration."""

    base_url: str = Field(
        default="http://localhost:11434",
        alias="CHATDOCK_AI_LLM_BASE_URL",
        description="Base URL of the chat backend",
    )
    model: str = Field(default="qwen2.5:7b", alias="CHATDOCK_AI_LLM_MODEL", description="Default chat model")
    timeout_seconds: float = Field(
        default=120.0, alias="CHATDOCK_AI_LLM_TIMEOUT_SECONDS", description="HTTP timeout for a chat request"
    )

    model_config = {"populate_by_name": True}


class AgentConfig(BaseModel):
    """Agent turn and supervisor configuration."""

    max_iterations: int = Field(
        default=20, alias="CHATDOCK_AI_MAX_ITERATIONS", description="Maximum model calls per agent turn"
    )
    system_prompt: str = Field(
        default=DEFAULT_SYSTEM_PROMPT, alias="CHATDOCK_AI_SYSTEM_PROMPT", description="Default system prompt"
    )
    max_tool_args_bytes: int = Field(
        default=64_000, alias="CHATDOCK_AI_MAX_TOOL_ARGS_BYTES", description="Upper bound for encoded tool arguments"
    )
    subagent_max_age_ms: int = Field(
        default=3_600_000,
        alias="CHATDOCK_AI_SUBAGENT_MAX_AGE_MS",
        description="Age after which finished background tasks are reaped",
    )

    model_config = {"populate_by_name": True}


class HeartbeatSettings(BaseModel):
    """Proactive scheduler configuration."""

    enabled: bool = Field(default=False, alias="CHATDOCK_AI_HEARTBEAT_ENABLED", description="Enable heartbeat")
    interval_ms: int = Field(
        default=3_600_000, alias="CHATDOCK_AI_HEARTBEAT_INTERVAL_MS", description="Heartbeat interval in ms"
    )
    prompt: str = Field(
        default=DEFAULT_HEARTBEAT_PROMPT, alias="CHATDOCK_AI_HEARTBEAT_PROMPT", description="Heartbeat prompt"
    )

    model_config = {"populate_by_name": True}


# =====================================================================
# Main Settings Class
# =====================================================================


class Settings(BaseSettings):
    """
    Application settings model.

    All properties are automatically bound from environment variables and .env file.
    Pydantic's BaseSettings handles dotenv loading automatically via model_config.
    """

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
        case_sensitive=True,
        populate_by_name=True,
    )

    # =====================================================================
    # ChatDock-AI Runtime Configuration
    # =====================================================================
    workspace_root: Path = Field(
        default=Path.home() / "ChatDock",
        description="Workspace root; file tools are confined to it and runtime state lives under config/",
        alias="CHATDOCK_AI_WORKSPACE_ROOT",
    )
    log_level: str = Field(
        default="INFO",
        description="Logging level (DEBUG, INFO, WARNING, ERROR, CRITICAL)",
        alias="CHATDOCK_AI_LOG_LEVEL",
    )
    enable_file_logging: bool = Field(
        default=False,
        description="Also write logs to a file",
        alias="CHATDOCK_AI_ENABLE_FILE_LOGGING",
    )

    # =====================================================================
    # LLM Backend
    # =====================================================================
    llm_base_url: str = Field(default="http://localhost:11434", alias="CHATDOCK_AI_LLM_BASE_URL")
    llm_model: str = Field(default="qwen2.5:7b", alias="CHATDOCK_AI_LLM_MODEL")
    llm_timeout_seconds: float = Field(default=120.0, alias="CHATDOCK_AI_LLM_TIMEOUT_SECONDS")

    # =====================================================================
    # Agent
    # =====================================================================
    max_iterations: int = Field(default=20, alias="CHATDOCK_AI_MAX_ITERATIONS")
    system_prompt: str = Field(default=DEFAULT_SYSTEM_PROMPT, alias="CHATDOCK_AI_SYSTEM_PROMPT")
    max_tool_args_bytes: int = Field(default=64_000, alias="CHATDOCK_AI_MAX_TOOL_ARGS_BYTES")
    subagent_max_age_ms: int = Field(default=3_600_000, alias="CHATDOCK_AI_SUBAGENT_MAX_AGE_MS")

    # =====================================================================
    # Heartbeat
    # =====================================================================
    heartbeat_enabled: bool = Field(default=False, alias="CHATDOCK_AI_HEARTBEAT_ENABLED")
    heartbeat_interval_ms: int = Field(default=3_600_000, alias="CHATDOCK_AI_HEARTBEAT_INTERVAL_MS")
    heartbeat_prompt: str = Field(default=DEFAULT_HEARTBEAT_PROMPT, alias="CHATDOCK_AI_HEARTBEAT_PROMPT")

    # =====================================================================
    # Computed Properties (Grouped Configurations)
    # =====================================================================

    @property
    def runtime_state_path(self) -> Path:
        """Location of the persisted capability/execution-mode state."""
        return Path(self.workspace_root).expanduser() / "config" / "runtime.json"

    @property
    def llm(self) -> LLMConfig:
        """Get LLM backend configuration."""
        return LLMConfig.model_validate(self.model_dump(by_alias=True))

    @property
    def agent(self) -> AgentConfig:
        """Get agent turn configuration."""
        return AgentConfig.model_validate(self.model_dump(by_alias=True))

    @property
    def heartbeat(self) -> HeartbeatSettings:
        """Get heartbeat configuration."""
        return HeartbeatSettings.model_validate(self.model_dump(by_alias=True))


settings = Settings()
