"""LLM client data models: retry policy & provider status

This module defines the data structures for:
- Retry configuration with exponential backoff (milliseconds)
- Rate limit information reported by the provider
- Connectivity check results
"""

from datetime import datetime
from typing import Any, Mapping, Optional, Union

from pydantic import BaseModel, ConfigDict, Field, model_validator


class RetryConfig(BaseModel):
    """Configuration for retry logic with exponential backoff

    Controls retry behavior for transient provider failures:
    - Total number of attempts (including the first one)
    - Delay calculation parameters

    Delay before attempt n+1 is
    ``min(base_delay_ms * backoff_multiplier ** (n - 1), max_delay_ms)``.
    """

    max_retries: int = Field(
        default=3,
        ge=1,
        le=10,
        alias="maxRetries",
        description="Maximum attempts (1 initial + N-1 retries)",
    )
    base_delay_ms: float = Field(
        default=1000.0,
        ge=0.0,
        le=60000.0,
        alias="baseDelay",
        description="Base delay for exponential backoff (ms)",
    )
    max_delay_ms: float = Field(
        default=10000.0,
        ge=0.0,
        le=300000.0,
        alias="maxDelay",
        description="Maximum delay cap (ms)",
    )
    backoff_multiplier: float = Field(
        default=2.0,
        ge=1.0,
        le=10.0,
        alias="backoffMultiplier",
        description="Growth factor between consecutive delays",
    )

    model_config = ConfigDict(
        frozen=True,
        populate_by_name=True,
        json_schema_extra={
            "example": {
                "maxRetries": 3,
                "baseDelay": 1000,
                "maxDelay": 10000,
                "backoffMultiplier": 2,
            }
        },
    )

    @model_validator(mode="after")
    def validate_delay_cap(self) -> "RetryConfig":
        """Ensure the cap is not below the base delay."""
        if self.max_delay_ms < self.base_delay_ms:
            raise ValueError("maxDelay must be >= baseDelay")
        return self

    def delay_for_attempt(self, attempt: int) -> float:
        """Backoff delay in milliseconds after a failed attempt (1-indexed)."""
        delay = self.base_delay_ms * (self.backoff_multiplier ** (attempt - 1))
        return min(delay, self.max_delay_ms)

    def merged(
        self, overrides: Optional[Union["RetryConfig", Mapping[str, Any]]]
    ) -> "RetryConfig":
        """Return a new config with a partial override applied.

        Keys may use either the camelCase wire names or the field names.
        """
        if overrides is None:
            return self
        if isinstance(overrides, RetryConfig):
            overrides = overrides.model_dump(exclude_unset=True)

        data = self.model_dump()
        aliases = {
            field.alias: name for name, field in type(self).model_fields.items()
        }
        for key, value in overrides.items():
            name = aliases.get(key, key)
            if name not in data:
                raise ValueError(f"Unknown retry setting: {key}")
            data[name] = value
        return type(self).model_validate(data)


class RateLimitInfo(BaseModel):
    """Provider rate limit snapshot parsed from response headers"""

    requests_per_minute: int = 0
    tokens_per_minute: int = 0
    requests_remaining: Optional[int] = None
    tokens_remaining: Optional[int] = None
    reset_time: Optional[datetime] = None


class ConnectionCheck(BaseModel):
    """Result of a provider connectivity check"""

    success: bool
    latency_ms: float
    error: Optional[str] = None
