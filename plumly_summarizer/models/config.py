from typing import Literal, Optional

from pydantic import BaseModel, Field

from plumly_summarizer.models.llm import RetryConfig


class LLMSettings(BaseModel):
    """LLM provider configuration"""

    provider: Literal["anthropic"] = Field("anthropic", description="LLM provider")
    model: str = Field("claude-3-5-sonnet-20241022", description="Model identifier")
    api_key: Optional[str] = Field(
        None, min_length=10, description="LLM API key (from environment)"
    )
    temperature: float = Field(0.3, ge=0.0, le=1.0, description="Sampling temperature")
    timeout_seconds: float = Field(
        30.0, gt=0, le=600, description="Connection-level request timeout"
    )


class SummarizerSettings(BaseModel):
    """Top-level summarizer configuration"""

    llm: LLMSettings = Field(default_factory=LLMSettings)
    retry: RetryConfig = Field(default_factory=RetryConfig)
    rate_limit_min_interval_ms: float = Field(
        100.0, ge=0.0, le=60000.0, description="Minimum spacing between calls"
    )
    log_level: str = Field("INFO", description="Logging level")
    json_logs: bool = Field(True, description="Emit JSON logs")
