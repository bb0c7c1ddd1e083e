import logging
import time
from dataclasses import dataclass
from enum import Enum
from typing import Callable, Optional

import anthropic
import openai
from anthropic import Anthropic
from openai import OpenAI
from tenacity import RetryCallState, Retrying, stop_after_attempt

from .config import AnalyzerConfig
from .exceptions import LLMRequestError, RetryExhaustedError

logger = logging.getLogger(__name__)


class ErrorClass(Enum):
    RATE_LIMITED = 'rate_limited'
    SERVER_ERROR = 'server_error'
    CLIENT_ERROR = 'client_error'


@dataclass
class RetryDecision:
    retry: bool
    delay_seconds: float = 0.0


def classify_status(status_code: Optional[int]) -> ErrorClass:
    """Map an HTTP status to the retry policy's error class."""
    if status_code == 429:
        return ErrorClass.RATE_LIMITED
    if status_code is not None and status_code >= 500:
        return ErrorClass.SERVER_ERROR
    return ErrorClass.CLIENT_ERROR


def retry_decision(error_class: ErrorClass, attempt: int, max_retries: int) -> RetryDecision:
    """
    Decide whether to retry after a failed attempt.

    `attempt` is the number of failed attempts so far (1 after the first failure).
    Rate limits back off exponentially (2^attempt seconds), server errors wait a
    fixed second, client errors are never retried.
    """
    if error_class is ErrorClass.CLIENT_ERROR or attempt >= max_retries:
        return RetryDecision(retry=False)
    if error_class is ErrorClass.RATE_LIMITED:
        return RetryDecision(retry=True, delay_seconds=float(2 ** attempt))
    return RetryDecision(retry=True, delay_seconds=1.0)


STATUS_ERRORS = (openai.APIStatusError, anthropic.APIStatusError)
CONNECTION_ERRORS = (openai.APIConnectionError, anthropic.APIConnectionError)


def _error_class(exc: BaseException) -> ErrorClass:
    if isinstance(exc, STATUS_ERRORS):
        return classify_status(exc.status_code)
    return ErrorClass.CLIENT_ERROR


class LLMClient:
    """Chat-completion client with a bounded retry policy, backed by OpenAI or Anthropic."""

    def __init__(
        self,
        config: AnalyzerConfig,
        client=None,
        sleep: Callable[[float], None] = time.sleep,
    ):
        self.config = config
        self.sleep = sleep

        # SDK-level retries are off, retry_decision is the only policy
        if client is not None:
            self.client = client
        elif config.provider == 'anthropic':
            self.client = Anthropic(api_key=config.api_key, max_retries=0)
        else:
            self.client = OpenAI(api_key=config.api_key, max_retries=0)

    def _request(self, system_prompt: str, user_prompt: str) -> str:
        if self.config.provider == 'anthropic':
            response = self.client.messages.create(
                model=self.config.model,
                max_tokens=self.config.max_tokens,
                temperature=self.config.temperature,
                system=system_prompt,
                messages=[
                    {"role": "user", "content": user_prompt}
                ]
            )
            return response.content[0].text

        response = self.client.chat.completions.create(
            model=self.config.model,
            messages=[
                {"role": "system", "content": system_prompt},
                {"role": "user", "content": user_prompt}
            ],
            temperature=self.config.temperature,
            max_tokens=self.config.max_tokens,
            response_format={"type": "json_object"},
        )
        return response.choices[0].message.content or ''

    def _decision(self, retry_state: RetryCallState) -> RetryDecision:
        exc = retry_state.outcome.exception()
        return retry_decision(_error_class(exc), retry_state.attempt_number, self.config.max_retries)

    def _should_retry(self, retry_state: RetryCallState) -> bool:
        if not retry_state.outcome.failed:
            return False
        return self._decision(retry_state).retry

    def _wait(self, retry_state: RetryCallState) -> float:
        return self._decision(retry_state).delay_seconds

    def _log_retry(self, retry_state: RetryCallState):
        exc = retry_state.outcome.exception()
        if _error_class(exc) is ErrorClass.RATE_LIMITED:
            logger.warning("Rate limit hit, waiting %.0fs...", retry_state.next_action.sleep)
        else:
            logger.warning(
                "API server error, attempt %d/%d", retry_state.attempt_number, self.config.max_retries
            )

    def complete_json(self, system_prompt: str, user_prompt: str) -> str:
        """Send one completion request and return the raw response text."""
        max_retries = self.config.max_retries
        retrying = Retrying(
            retry=self._should_retry,
            wait=self._wait,
            stop=stop_after_attempt(max_retries),
            before_sleep=self._log_retry,
            sleep=self.sleep,
            reraise=True,
        )

        try:
            return retrying(self._request, system_prompt, user_prompt)
        except STATUS_ERRORS as e:
            status = e.status_code
            if classify_status(status) is ErrorClass.CLIENT_ERROR:
                raise LLMRequestError(f"API request failed ({status}): {e}", status_code=status)
            raise RetryExhaustedError(f"Failed after {max_retries} attempts ({status})", status_code=status)
        except CONNECTION_ERRORS as e:
            raise LLMRequestError(f"Could not reach the API: {e}")
