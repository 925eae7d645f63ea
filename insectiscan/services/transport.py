"""
HTTP transport to the chat-completions endpoint with retry and backoff.

One call to RetryingTransport.send() is one logical request: it either
returns the reply text or raises exactly one AnalysisError subclass.
Connectivity failures and 5xx responses are retried with exponential
backoff (2s, 4s, ... at the default base delay); 4xx responses never are.
"""

import asyncio
import json
import logging
from dataclasses import dataclass
from typing import Awaitable, Callable, Optional

import httpx
from pydantic import ValidationError

from insectiscan.config import Settings, settings as default_settings
from insectiscan.models import ProgressCallback, ProgressEvent, emit_progress
from insectiscan.services.ai_schemas import ChatCompletionRequest, ChatCompletionResponse
from insectiscan.services.errors import (
    AnalysisError,
    ErrorKind,
    InvalidResponseError,
    NetworkError,
    NoDataError,
    ParsingError,
    RateLimitError,
    RequestTimeoutError,
    ServerError,
    UnauthorizedError,
)

logger = logging.getLogger(__name__)

UPLOAD_STARTED = 0.1
UPLOAD_SENT = 0.4
UPLOAD_RECEIVED = 0.9

# Connectivity-class failures: timeout, no connection, connection lost
TRANSIENT_EXCEPTIONS = (
    httpx.TimeoutException,
    httpx.NetworkError,
    httpx.RemoteProtocolError,
)


@dataclass
class RetryState:
    """Attempt bookkeeping for a single send() call."""

    max_attempts: int
    base_delay: float
    attempt: int = 0  # attempts made so far
    delay: float = 0.0  # last computed backoff

    @property
    def can_retry(self) -> bool:
        return self.attempt < self.max_attempts

    def next_delay(self) -> float:
        # attempt 1 failed -> 2^1 * base, attempt 2 failed -> 2^2 * base, ...
        self.delay = self.base_delay * (2 ** self.attempt)
        return self.delay


def map_status(status_code: int) -> Optional[AnalysisError]:
    """Map a non-2xx status to its error; None for success codes."""
    if 200 <= status_code <= 299:
        return None
    if status_code == 401:
        return UnauthorizedError()
    if status_code == 429:
        return RateLimitError()
    if 500 <= status_code <= 599:
        return ServerError(status_code)
    return InvalidResponseError(status_code)


def extract_content(response: httpx.Response) -> str:
    """Pull choices[0].message.content out of a 2xx response body."""
    if not response.content:
        raise NoDataError("Empty response body")

    try:
        body = ChatCompletionResponse.model_validate(response.json())
    except (json.JSONDecodeError, UnicodeDecodeError, ValidationError) as e:
        raise ParsingError(f"Failed to decode response: {e}") from e

    content = body.first_content
    if not content:
        raise NoDataError("No message content in response")
    return content


class RetryingTransport:
    """Sends ChatCompletionRequests with exponential backoff on transient failures."""

    def __init__(
        self,
        client: Optional[httpx.AsyncClient] = None,
        api_key: Optional[str] = None,
        endpoint: Optional[str] = None,
        base_delay: Optional[float] = None,
        sleep: Callable[[float], Awaitable[None]] = asyncio.sleep,
        settings: Optional[Settings] = None,
    ):
        config = settings or default_settings
        self._owns_client = client is None
        if client is None:
            timeout = httpx.Timeout(
                timeout=config.request_timeout,
                connect=config.connect_timeout,
            )
            client = httpx.AsyncClient(timeout=timeout)
        self.client = client
        self.api_key = api_key if api_key is not None else config.openai_api_key
        self.endpoint = endpoint or config.chat_completions_url
        self.base_delay = (
            base_delay if base_delay is not None else config.retry_base_delay
        )
        self._sleep = sleep

    async def aclose(self) -> None:
        if self._owns_client:
            await self.client.aclose()

    async def __aenter__(self) -> "RetryingTransport":
        return self

    async def __aexit__(self, *exc_info) -> None:
        await self.aclose()

    def _headers(self) -> dict[str, str]:
        return {
            "Authorization": f"Bearer {self.api_key}",
            "Content-Type": "application/json",
        }

    async def send(
        self,
        payload: ChatCompletionRequest,
        max_attempts: int = 3,
        on_progress: Optional[ProgressCallback] = None,
    ) -> str:
        """
        Send one logical request, retrying transient failures.

        Args:
            payload: Fully built request body
            max_attempts: Total attempts including the first (minimum 1)
            on_progress: Receives upload milestones and retry notices

        Returns:
            The model's reply text (choices[0].message.content)

        Raises:
            RequestTimeoutError / NetworkError: Connectivity failure after retries
            ServerError: 5xx after retries
            UnauthorizedError, RateLimitError, InvalidResponseError: Immediately
            NoDataError, ParsingError: Unusable 2xx body
        """
        state = RetryState(max_attempts=max(1, max_attempts), base_delay=self.base_delay)
        body = payload.model_dump(mode="json")

        while True:
            state.attempt += 1
            error = await self._attempt(body, state, on_progress)
            if isinstance(error, str):
                return error

            if not (error.is_transient and state.can_retry):
                if error.is_transient:
                    logger.error(
                        "All %d attempts failed: %s", state.max_attempts, error.kind.value
                    )
                raise error

            delay = state.next_delay()
            logger.warning(
                "%s on attempt %d/%d, retrying in %.1fs...",
                error.kind.value,
                state.attempt,
                state.max_attempts,
                delay,
            )
            emit_progress(on_progress, ProgressEvent.retrying(delay, error.kind))
            await self._sleep(delay)

    async def _attempt(
        self,
        body: dict,
        state: RetryState,
        on_progress: Optional[ProgressCallback],
    ):
        """Run one attempt. Returns the reply text or the error to act on."""
        emit_progress(on_progress, ProgressEvent.uploading(UPLOAD_STARTED))
        logger.info(
            "Sending prompt (attempt %d of %d)", state.attempt, state.max_attempts
        )
        emit_progress(on_progress, ProgressEvent.uploading(UPLOAD_SENT))

        try:
            response = await self.client.post(
                self.endpoint, json=body, headers=self._headers()
            )
        except httpx.TimeoutException as e:
            return RequestTimeoutError(str(e) or "Request timed out")
        except TRANSIENT_EXCEPTIONS as e:
            return NetworkError(str(e) or type(e).__name__)
        except httpx.HTTPError as e:
            # Non-transient transport failure (bad URL, unsupported protocol...)
            raise NetworkError(str(e) or type(e).__name__) from e

        emit_progress(on_progress, ProgressEvent.uploading(UPLOAD_RECEIVED))
        logger.info("Status code: %d", response.status_code)

        error = map_status(response.status_code)
        if error is not None:
            if error.kind == ErrorKind.SERVER_ERROR:
                return error
            raise error

        content = extract_content(response)
        emit_progress(on_progress, ProgressEvent.analyzing())
        return content
