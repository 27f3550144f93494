"""Summary Client - Main Orchestrator

This client turns a clinical-data SummaryRequest into a validated
SummaryResponse by delegating to:
- PromptBuilder for prompt construction (external collaborator)
- token_budget for the max-output-token budget
- RetryHandler + RateLimiter for resilient provider calls
- ErrorClassifier for the retryable/non-retryable decision
- ResponseParser / FallbackSynthesizer / ResponseValidator for the output

summarize() either returns a fully validated response or raises
SummarizationError; there is no partial success.
"""

import asyncio
import os
import time
from datetime import datetime, timezone
from typing import Any, Awaitable, Callable, Dict, Mapping, Optional, Tuple, Union

from pydantic import ValidationError

from plumly_summarizer.models.config import SummarizerSettings
from plumly_summarizer.models.llm import ConnectionCheck, RateLimitInfo, RetryConfig
from plumly_summarizer.models.summary import (
    Persona,
    SummaryRequest,
    SummaryResponse,
    TemplateInfo,
)
from plumly_summarizer.observability.context import correlation_scope
from plumly_summarizer.observability.logging import get_logger, request_log_context
from plumly_summarizer.observability.metrics import (
    LLM_REQUEST_DURATION,
    LLM_REQUESTS_TOTAL,
    LLM_RETRIES_TOTAL,
    SUMMARY_DURATION,
    SUMMARY_FALLBACKS_TOTAL,
    SUMMARY_REQUESTS_TOTAL,
)
from plumly_summarizer.services.llm.error_classifier import ErrorClassifier
from plumly_summarizer.services.llm.exceptions import LLMProviderError
from plumly_summarizer.services.llm.fallback import FallbackSynthesizer
from plumly_summarizer.services.llm.prompt_builder import (
    PromptBuilder,
    TemplatePromptBuilder,
    build_system_prompt,
)
from plumly_summarizer.services.llm.providers.anthropic import AnthropicProvider
from plumly_summarizer.services.llm.providers.base import LLMProvider, LLMResponse
from plumly_summarizer.services.llm.response_parser import ResponseParser
from plumly_summarizer.services.llm.response_validator import ResponseValidator
from plumly_summarizer.services.llm.token_budget import calculate_max_tokens
from plumly_summarizer.utils.exceptions import (
    JSONParseError,
    PromptBuildError,
    RequestValidationError,
    SummarizationError,
)
from plumly_summarizer.utils.rate_limiter import RateLimiter
from plumly_summarizer.utils.retry import RetryContext, RetryHandler

logger = get_logger("summary_client")

DEFAULT_TEMPLATE_VERSION = "1.0.0"

RequestLike = Union[SummaryRequest, Mapping[str, Any]]


class SummaryClient:
    """Resilient LLM orchestration for clinical summaries.

    One instance owns one RetryConfig (fixed at construction) and one
    RateLimiter whose state persists across calls. Instances may be shared
    by concurrent tasks; the limiter serializes its own bookkeeping.
    """

    def __init__(
        self,
        provider: Optional[LLMProvider] = None,
        *,
        api_key: Optional[str] = None,
        prompt_builder: Optional[PromptBuilder] = None,
        retry_config: Optional[Union[RetryConfig, Mapping[str, Any]]] = None,
        rate_limiter: Optional[RateLimiter] = None,
        sleep: Callable[[float], Awaitable[None]] = asyncio.sleep,
    ):
        """Initialize summary client.

        Args:
            provider: Text-completion provider. When omitted, an
                AnthropicProvider is built from ``api_key`` or the
                ANTHROPIC_API_KEY environment variable.
            api_key: Anthropic API key (used only when provider is omitted)
            prompt_builder: Prompt template collaborator
            retry_config: Partial or full retry settings merged over defaults
            rate_limiter: Outbound rate limiter (100 ms spacing by default)
            sleep: Coroutine function used for backoff sleeps (seconds)

        Raises:
            LLMProviderError: If no provider is given and no API key is found
        """
        if provider is None:
            api_key = api_key or os.environ.get("ANTHROPIC_API_KEY")
            if not api_key:
                raise LLMProviderError(
                    "Anthropic API key is required", provider="anthropic"
                )
            provider = AnthropicProvider(api_key=api_key)

        self.provider = provider
        self.prompt_builder: PromptBuilder = prompt_builder or TemplatePromptBuilder()
        self.retry_config = RetryConfig().merged(retry_config)
        self.rate_limiter = rate_limiter or RateLimiter()

        self._classifier = ErrorClassifier()
        self._parser = ResponseParser()
        self._fallback = FallbackSynthesizer()
        self._validator = ResponseValidator()
        self._retry_handler = RetryHandler(
            self.retry_config,
            classify=self._classifier.classify,
            rate_limiter=self.rate_limiter,
            sleep=sleep,
        )
        self._rate_limit_info: Optional[RateLimitInfo] = None

        logger.info(
            "summary_client_initialized",
            provider=provider.name,
            model=provider.model,
            max_retries=self.retry_config.max_retries,
            min_interval_ms=self.rate_limiter.min_interval * 1000,
        )

    @classmethod
    def from_settings(
        cls,
        settings: SummarizerSettings,
        prompt_builder: Optional[PromptBuilder] = None,
    ) -> "SummaryClient":
        """Build a client from validated settings."""
        api_key = settings.llm.api_key or os.environ.get("ANTHROPIC_API_KEY")
        if not api_key:
            raise LLMProviderError("Anthropic API key is required", provider="anthropic")

        provider = AnthropicProvider(
            api_key=api_key,
            model=settings.llm.model,
            temperature=settings.llm.temperature,
            timeout_seconds=settings.llm.timeout_seconds,
        )
        return cls(
            provider,
            prompt_builder=prompt_builder,
            retry_config=settings.retry,
            rate_limiter=RateLimiter(settings.rate_limit_min_interval_ms),
        )

    async def summarize(self, request: RequestLike) -> SummaryResponse:
        """Generate a validated summary for a request.

        Args:
            request: SummaryRequest, or a mapping using the wire field names

        Returns:
            Validated SummaryResponse with enriched metadata

        Raises:
            SummarizationError: On any terminal failure
        """
        persona = _persona_of(request)
        with correlation_scope(), request_log_context(persona=persona):
            return await self._summarize(request)

    async def _summarize(self, request: RequestLike) -> SummaryResponse:
        start_time = time.perf_counter()
        persona = _persona_of(request)

        try:
            summary_request = self._validate_request(request)
            logger.info(
                "summarize_started",
                ab_test_variant=summary_request.ab_test_variant,
            )

            prompt, system_prompt = self._build_prompt(summary_request)
            max_tokens = calculate_max_tokens(
                summary_request.resource_data, summary_request.persona
            )

            retry_context = RetryContext()
            response = await self._retry_handler.execute(
                lambda: self._call_provider(system_prompt, prompt, max_tokens),
                on_retry=self._record_retry,
                context=retry_context,
            )

            candidate = self._parse(response.content)
            template = self.prompt_builder.get_template(summary_request.persona)
            validated = self._validator.validate(
                candidate,
                summary_request.persona,
                template.id if template else "unknown",
            )
            result = self._enrich(validated, summary_request, template, start_time)

        except Exception as e:
            processing_time = _elapsed_ms(start_time)
            error = self._enhance_error(e, processing_time, persona)
            logger.error(
                "summarize_failed",
                error_kind=error.type.value,
                retryable=error.retryable,
                error=str(e),
                processing_time_ms=processing_time,
            )
            SUMMARY_REQUESTS_TOTAL.labels(
                persona=persona or "unknown", status=error.type.value
            ).inc()
            raise error from e

        SUMMARY_REQUESTS_TOTAL.labels(persona=persona, status="success").inc()
        SUMMARY_DURATION.labels(persona=persona).observe(
            result.metadata["processingTime"] / 1000
        )
        logger.info(
            "summarize_completed",
            attempts=retry_context.total_attempts,
            sections=len(result.sections),
            fallback=bool(result.metadata.get("fallback")),
            processing_time_ms=result.metadata["processingTime"],
        )
        return result

    def _validate_request(self, request: RequestLike) -> SummaryRequest:
        """Check request shape before any provider work.

        Raises:
            RequestValidationError: If resourceData, persona or patient is missing
        """
        if not isinstance(request, SummaryRequest):
            data = dict(request or {})
            if not (data.get("resourceData") or data.get("resource_data")):
                raise RequestValidationError("ResourceData is required")
            if data.get("persona") not in _PERSONA_VALUES:
                raise RequestValidationError("Valid persona is required")
            try:
                request = SummaryRequest.model_validate(data)
            except ValidationError as e:
                raise RequestValidationError(f"Invalid summary request: {e}")

        if not request.resource_data:
            raise RequestValidationError("ResourceData is required")
        if not request.resource_data.get("patient"):
            raise RequestValidationError("Patient data is required in resourceData")
        return request

    def _build_prompt(self, request: SummaryRequest) -> Tuple[str, str]:
        """(user prompt, system prompt) for a request.

        Raises:
            PromptBuildError: If the prompt builder fails
        """
        try:
            prompt = self.prompt_builder.build_prompt(
                request.resource_data,
                request.persona,
                request.template_options,
                request.ab_test_variant,
            )
        except Exception as e:
            raise PromptBuildError(f"Failed to build prompt: {e}") from e
        return prompt, build_system_prompt(request.persona)

    async def _call_provider(
        self, system_prompt: str, prompt: str, max_tokens: int
    ) -> LLMResponse:
        """One outbound provider call (rate limiting is applied by the caller)."""
        try:
            with LLM_REQUEST_DURATION.time():
                response = await self.provider.complete(system_prompt, prompt, max_tokens)
        except Exception:
            LLM_REQUESTS_TOTAL.labels(status="failed").inc()
            raise

        LLM_REQUESTS_TOTAL.labels(status="success").inc()
        if response.rate_limit is not None:
            self._rate_limit_info = response.rate_limit
        return response

    def _record_retry(self, attempt: int, error: BaseException, delay_ms: float) -> None:
        LLM_RETRIES_TOTAL.labels(kind=self._classifier.classify(error).kind.value).inc()

    def _parse(self, text: str) -> Dict[str, Any]:
        """Parsed JSON object, or a synthesized candidate when none is found."""
        try:
            return self._parser.parse(text)
        except JSONParseError as e:
            logger.warning("response_fallback_used", reason=str(e)[:200])
            SUMMARY_FALLBACKS_TOTAL.inc()
            return self._fallback.synthesize(text)

    def _enrich(
        self,
        response: SummaryResponse,
        request: SummaryRequest,
        template: Optional[TemplateInfo],
        start_time: float,
    ) -> SummaryResponse:
        metadata = {
            **response.metadata,
            "processingTime": _elapsed_ms(start_time),
            "timestamp": datetime.now(timezone.utc).isoformat(),
            "templateId": template.id if template else "unknown",
            "templateVersion": template.version if template else DEFAULT_TEMPLATE_VERSION,
        }
        if request.ab_test_variant:
            metadata["abTestVariant"] = request.ab_test_variant
        return response.model_copy(update={"metadata": metadata})

    def _enhance_error(
        self,
        error: Exception,
        processing_time: float,
        persona: Optional[str],
    ) -> SummarizationError:
        info = self._classifier.classify(error)
        return SummarizationError(
            info.message,
            type=info.kind,
            retryable=info.retryable,
            processing_time=processing_time,
            persona=persona,
            original_error=error,
        )

    def get_retry_config(self) -> RetryConfig:
        """Current (immutable) retry configuration."""
        return self.retry_config

    def get_rate_limit_info(self) -> Optional[RateLimitInfo]:
        """Rate limit snapshot from the most recent provider response."""
        return self._rate_limit_info

    @property
    def request_count(self) -> int:
        """Outbound calls permitted by this client's rate limiter."""
        return self.rate_limiter.request_count

    async def test_connection(self) -> ConnectionCheck:
        """Check the provider with a tiny request. Never raises."""
        start_time = time.perf_counter()
        try:
            async with self.rate_limiter.enforce():
                await self.provider.complete(None, "Hello", 10)
        except Exception as e:
            logger.warning("connection_check_failed", error=str(e))
            return ConnectionCheck(
                success=False, latency_ms=_elapsed_ms(start_time), error=str(e)
            )
        return ConnectionCheck(success=True, latency_ms=_elapsed_ms(start_time))


_PERSONA_VALUES = {p.value for p in Persona}


def _persona_of(request: Any) -> Optional[str]:
    """Persona value of a request, if it carries a recognizable one."""
    if isinstance(request, SummaryRequest):
        return request.persona.value
    if isinstance(request, Mapping):
        persona = request.get("persona")
        return persona if persona in _PERSONA_VALUES else None
    return None


def _elapsed_ms(start_time: float) -> float:
    return (time.perf_counter() - start_time) * 1000
