"""HTTP client for the Gemini generateContent API.

Sends a single prompt and returns the first candidate's text, mapping
HTTP failures onto the provider exception taxonomy.
"""

from __future__ import annotations

import re

import httpx
from pydantic import ValidationError

from product_comparison.llm.exceptions import (
    GenericProviderError,
    ParseError,
    ProviderConfigurationError,
    ProviderUnavailableError,
    QuotaExceededError,
)
from product_comparison.llm.models import (
    GeminiErrorResponse,
    GeminiGenerateRequest,
    GeminiGenerateResponse,
)
from product_comparison.observability.logging import get_logger


logger = get_logger(__name__)

RETRY_INFO_TYPE = "type.googleapis.com/google.rpc.RetryInfo"
QUOTA_FAILURE_TYPE = "type.googleapis.com/google.rpc.QuotaFailure"

_DURATION_PATTERN = re.compile(r"^\s*(\d+(?:\.\d+)?)s\s*$")


def parse_retry_delay(value: str | None) -> float | None:
    """Convert a protobuf duration string such as ``"45s"`` to seconds.

    Returns None when the value is missing or not a duration.
    """
    if not value:
        return None
    match = _DURATION_PATTERN.match(value)
    if match is None:
        return None
    return float(match.group(1))


class GeminiClient:
    """Async HTTP client for the Gemini text-generation API.

    Attributes:
        base_url: API host, e.g. https://generativelanguage.googleapis.com.
        api_version: API version path segment (v1beta, v1).
        model: Model name (e.g., gemini-1.5-flash).
        timeout: HTTP request timeout in seconds.
    """

    DEFAULT_BASE_URL = "https://generativelanguage.googleapis.com"

    def __init__(
        self,
        api_key: str,
        model: str = "gemini-1.5-flash",
        api_version: str = "v1beta",
        base_url: str = DEFAULT_BASE_URL,
        timeout: float = 30.0,
    ) -> None:
        """Initialize the Gemini client.

        Args:
            api_key: Gemini API key, sent as the ``key`` query parameter.
            model: Default model name.
            api_version: API version path segment.
            base_url: API host.
            timeout: HTTP request timeout in seconds (default: 30).

        Raises:
            ProviderConfigurationError: If the API key or model is empty.
        """
        if not api_key:
            msg = "Gemini API key is not configured"
            raise ProviderConfigurationError(msg)
        if not model or not api_version:
            msg = "Gemini model and API version must be set"
            raise ProviderConfigurationError(msg)

        self.api_key = api_key
        self.model = model
        self.api_version = api_version
        self.base_url = base_url.rstrip("/")
        self.timeout = timeout
        self._http_client: httpx.AsyncClient | None = None

    @property
    def generate_url(self) -> str:
        """Get the generateContent endpoint URL (without the key)."""
        return (
            f"{self.base_url}/{self.api_version}/models/{self.model}:generateContent"
        )

    async def initialize(self) -> None:
        """Initialize the HTTP client."""
        if self._http_client is not None:
            return

        self._http_client = httpx.AsyncClient(
            timeout=httpx.Timeout(self.timeout),
            headers={"Content-Type": "application/json"},
            limits=httpx.Limits(
                max_keepalive_connections=5,
                max_connections=10,
            ),
        )
        logger.info(
            "GeminiClient initialized",
            url=self.generate_url,
            timeout=self.timeout,
        )

    async def shutdown(self) -> None:
        """Close the HTTP client and release connections."""
        if self._http_client is not None:
            await self._http_client.aclose()
            self._http_client = None
            logger.debug("GeminiClient shutdown")

    async def send(self, prompt: str) -> str:
        """Send a prompt and return the first candidate's text.

        Args:
            prompt: Input prompt text.

        Returns:
            Raw generated text.

        Raises:
            QuotaExceededError: On HTTP 429.
            ProviderUnavailableError: On HTTP 404, timeouts, connection errors.
            ParseError: If the response lacks candidates or parts.
            GenericProviderError: On any other HTTP error.
        """
        if self._http_client is None:
            await self.initialize()

        assert self._http_client is not None

        request = GeminiGenerateRequest.from_prompt(prompt)
        logger.debug("Sending request to Gemini", url=self.generate_url)

        try:
            response = await self._http_client.post(
                self.generate_url,
                params={"key": self.api_key},
                json=request.model_dump(exclude_none=True),
            )
        except httpx.TimeoutException as e:
            logger.warning("Gemini request timeout", timeout=self.timeout)
            msg = f"Gemini timeout after {self.timeout}s"
            raise ProviderUnavailableError(msg) from e
        except httpx.RequestError as e:
            logger.warning("Gemini connection error", error=str(e))
            msg = f"Cannot connect to Gemini: {e}"
            raise ProviderUnavailableError(msg) from e

        if response.is_error:
            self._raise_for_error(response)

        return self._extract_text(response)

    def _raise_for_error(self, response: httpx.Response) -> None:
        """Map a non-2xx response onto the provider exception taxonomy."""
        body = response.text or "{}"

        if response.status_code == 429:
            retry_delay = self._parse_quota_error(body)
            logger.warning(
                "Gemini rate limit exceeded",
                suggested_retry_delay=retry_delay,
            )
            raise QuotaExceededError(
                f"Quota exceeded. Response: {body}",
                retry_delay=retry_delay,
            )

        if response.status_code == 404:
            logger.error("Gemini model or endpoint not found", body=body)
            msg = (
                "Model or endpoint not found. Please check the model name "
                f"and API version. Response: {body}"
            )
            raise ProviderUnavailableError(msg)

        logger.error(
            "Gemini API error",
            status_code=response.status_code,
            body=body,
        )
        msg = f"Gemini returned {response.status_code}: {body}"
        raise GenericProviderError(msg)

    def _parse_quota_error(self, body: str) -> float | None:
        """Extract the RetryInfo delay from a 429 body, logging quota violations."""
        try:
            error = GeminiErrorResponse.model_validate_json(body).error
        except ValidationError:
            logger.warning("Unparseable Gemini quota error body", body=body[:500])
            return None

        retry_delay: float | None = None
        for detail in error.details:
            if detail.type == RETRY_INFO_TYPE:
                retry_delay = parse_retry_delay(detail.retry_delay)
            elif detail.type == QUOTA_FAILURE_TYPE:
                logger.error("Gemini quota violations", violations=detail.violations)
        return retry_delay

    def _extract_text(self, response: httpx.Response) -> str:
        """Return ``candidates[0].content.parts[0].text`` or raise ParseError."""
        try:
            parsed = GeminiGenerateResponse.model_validate_json(response.content)
        except ValidationError as e:
            logger.error(
                "Failed to parse Gemini response",
                body=response.text[:500],
            )
            msg = "Failed to parse response"
            raise ParseError(msg) from e

        if not parsed.candidates:
            msg = "No candidates in response"
            raise ParseError(msg)

        parts = parsed.candidates[0].content.parts
        if not parts:
            msg = "No parts in response"
            raise ParseError(msg)

        return parts[0].text
