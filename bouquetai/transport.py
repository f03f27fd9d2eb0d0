"""HTTP transport with bounded retry for provider calls.

Architectural role:
    Every outbound pipeline request goes through `RetryTransport.send`. Adapters
    only ever see a 2xx `requests.Response` or one of the `bouquetai.errors`
    classes.

Retry behavior:
    - 404 -> `NotFoundError` immediately; no retry budget consumed.
    - 429 / 5xx / connection errors / timeouts -> `TransientError`, retried with a
      constant delay until `max_attempts` calls were made.
    - Any other non-2xx -> `ProviderError`, terminal.
    Exhausting the budget re-raises the last observed `TransientError` unchanged.

Observability:
    Each attempt is logged at DEBUG and passed to the optional `on_attempt`
    callback. Neither can alter control flow.
"""

import logging
from dataclasses import dataclass
from typing import Any, Callable

import requests
from tenacity import Retrying, retry_if_exception_type, stop_after_attempt, wait_fixed

from bouquetai import config
from bouquetai.errors import NotFoundError, ProviderError, TransientError
from bouquetai.types import CancellationToken, pause


logger = logging.getLogger(__name__)

ERROR_DETAIL_CHARS = 200


@dataclass(frozen=True)
class TransportAttempt:
    """One outbound call as seen by `on_attempt` observers."""

    number: int
    method: str
    url: str
    status: int | None = None
    error: str | None = None


def mask_headers(headers: dict[str, str] | None) -> dict[str, str]:
    """Return a copy of `headers` safe for logging."""
    masked = dict(headers or {})
    for name in list(masked):
        if name.lower() == "authorization":
            masked[name] = "***"
    return masked


def error_from_response(response: requests.Response) -> ProviderError:
    """Build a provider error from a non-2xx response.

    JSON bodies are kept as structured `detail`; the message comes from
    `error.message` or a top-level `message` when present. Non-JSON bodies keep
    their first `ERROR_DETAIL_CHARS` characters as `detail`.
    """
    status = response.status_code
    message = f"API error: {status}"
    content_type = response.headers.get("content-type", "")

    detail: Any
    if "json" in content_type:
        try:
            detail = response.json()
        except ValueError:
            detail = response.text[:ERROR_DETAIL_CHARS]
    else:
        detail = response.text[:ERROR_DETAIL_CHARS]

    if isinstance(detail, dict):
        error = detail.get("error")
        if isinstance(error, dict) and error.get("message"):
            message = str(error["message"])
        elif isinstance(error, str) and error:
            message = error
        elif detail.get("message"):
            message = str(detail["message"])

    if status == 429 or status >= 500:
        return TransientError(message, status=status, detail=detail)
    return ProviderError(message, status=status, detail=detail)


class RetryTransport:
    """Send requests with constant-backoff retry for transient failures.

    Args:
        session: `requests.Session`-compatible object; a new session by default.
        max_attempts: Default total number of calls per `send`.
        retry_delay: Constant delay in seconds between attempts.
        timeout: Per-request timeout passed to the session.
        on_attempt: Optional observer called once per attempt.
    """

    def __init__(
        self,
        session: requests.Session | None = None,
        max_attempts: int = config.MAX_ATTEMPTS,
        retry_delay: float = config.RETRY_DELAY_SECONDS,
        timeout: float = config.REQUEST_TIMEOUT_SECONDS,
        on_attempt: Callable[[TransportAttempt], None] | None = None,
    ) -> None:
        self.session = session or requests.Session()
        self.max_attempts = max_attempts
        self.retry_delay = retry_delay
        self.timeout = timeout
        self.on_attempt = on_attempt

    def send(
        self,
        url: str,
        method: str = "POST",
        json: dict | None = None,
        headers: dict[str, str] | None = None,
        max_attempts: int | None = None,
        token: CancellationToken | None = None,
    ) -> requests.Response:
        """Send one logical request, retrying transient failures.

        Returns:
            The first 2xx response.

        Raises:
            NotFoundError: On HTTP 404.
            ProviderError: On terminal non-2xx responses.
            TransientError: When the retry budget is exhausted.
            CancelledError: When `token` is cancelled before an attempt or
                during a backoff sleep.
        """
        attempts = max(1, max_attempts if max_attempts is not None else self.max_attempts)
        counter = {"n": 0}

        def attempt() -> requests.Response:
            counter["n"] += 1
            return self._attempt(counter["n"], url, method, json, headers, token)

        retryer = Retrying(
            stop=stop_after_attempt(attempts),
            wait=wait_fixed(self.retry_delay),
            retry=retry_if_exception_type(TransientError),
            sleep=lambda seconds: pause(seconds, token),
            before_sleep=self._log_retry,
            reraise=True,
        )
        return retryer(attempt)

    def _attempt(self, number, url, method, json, headers, token) -> requests.Response:
        if token is not None:
            token.raise_if_cancelled()

        logger.debug(
            "Request attempt %d: %s %s headers=%s",
            number, method, url, mask_headers(headers),
        )

        try:
            response = self.session.request(
                method,
                url,
                json=json,
                headers=headers,
                timeout=self.timeout,
            )
        except (requests.ConnectionError, requests.Timeout) as exc:
            self._observe(TransportAttempt(number, method, url, error=str(exc)))
            raise TransientError(f"Network error: {exc}") from exc
        except requests.RequestException as exc:
            self._observe(TransportAttempt(number, method, url, error=str(exc)))
            raise ProviderError(f"Request failed: {exc}") from exc

        self._observe(TransportAttempt(number, method, url, status=response.status_code))
        logger.debug("Response status %d from %s", response.status_code, url)

        if response.status_code == 404:
            logger.warning("Endpoint not found: %s", url)
            raise NotFoundError(f"Endpoint not found: {url}", url=url)

        if response.ok:
            return response

        error = error_from_response(response)
        logger.debug("Error response from %s: %r", url, error.detail)
        raise error

    def _observe(self, attempt: TransportAttempt) -> None:
        if self.on_attempt is None:
            return
        try:
            self.on_attempt(attempt)
        except Exception:
            logger.exception("Transport attempt observer failed")

    def _log_retry(self, retry_state) -> None:
        exc = retry_state.outcome.exception()
        logger.info(
            "Attempt %d failed (%s). Retrying in %.1fs...",
            retry_state.attempt_number,
            exc,
            retry_state.next_action.sleep if retry_state.next_action else self.retry_delay,
        )
