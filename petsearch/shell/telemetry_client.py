"""Telemetry Client - Imperative Shell.

This module posts weather/search correlation reports to the central
aggregation service. Payloads are built in core/telemetry.py.

Reporting is fire-and-forget: reports are posted from a background
thread pool with retries, and failures are only logged.
"""

import logging
import threading
from concurrent.futures import Future, ThreadPoolExecutor
from typing import Any

import requests
from tenacity import (
    Retrying,
    retry_if_exception_type,
    stop_after_attempt,
    wait_exponential,
)
from tenacity.wait import wait_base

from petsearch.core.config import TelemetryConfig


logger = logging.getLogger(__name__)


class TelemetryClient:
    """Client for posting telemetry reports.

    This is part of the imperative shell - it handles HTTP I/O.
    """

    def __init__(
        self,
        config: TelemetryConfig | None = None,
        wait: wait_base | None = None,
    ) -> None:
        """Initialize telemetry client.

        Args:
            config: Telemetry configuration
            wait: Backoff between attempts (exponential by default)
        """
        self.config = config or TelemetryConfig()
        self.wait = wait or wait_exponential(multiplier=1, min=1, max=10)

    def _post_once(self, payload: dict[str, Any]) -> None:
        response = requests.post(
            self.config.endpoint_url,
            json=payload,
            timeout=self.config.timeout_seconds,
        )
        response.raise_for_status()

    def post_report(self, payload: dict[str, Any]) -> bool:
        """Post one report, retrying transient failures.

        This method performs HTTP I/O.

        Args:
            payload: Report built by format_telemetry_report

        Returns:
            True if the report was accepted
        """
        if not self.config.enabled:
            logger.debug("Telemetry disabled, skipping report")
            return False

        retrying = Retrying(
            stop=stop_after_attempt(self.config.max_attempts),
            wait=self.wait,
            retry=retry_if_exception_type(requests.RequestException),
            reraise=True,
        )

        try:
            retrying(self._post_once, payload)
        except requests.RequestException as e:
            logger.error(
                "Telemetry report for case %s failed after %d attempts: %s",
                payload.get("case_id"),
                self.config.max_attempts,
                str(e),
            )
            return False

        logger.info("Telemetry report sent for case %s", payload.get("case_id"))
        return True


class TelemetryReporter:
    """Background submitter for telemetry reports.

    Decisions never wait on reporting; call shutdown() on exit to flush.
    At most max_pending reports are queued or in flight at once. While
    the backlog is full, new reports are dropped with a warning instead
    of growing the queue.
    """

    def __init__(
        self,
        client: TelemetryClient,
        max_workers: int = 2,
        max_pending: int | None = None,
    ) -> None:
        self.client = client
        self.max_pending = max_pending or client.config.max_pending
        self._slots = threading.BoundedSemaphore(self.max_pending)
        self._executor = ThreadPoolExecutor(
            max_workers=max_workers,
            thread_name_prefix="telemetry",
        )

    def report(self, payload: dict[str, Any]) -> Future | None:
        """Queue a report for sending.

        Returns:
            Future for the send, or None if telemetry is disabled or the
            backlog is full
        """
        if not self.client.config.enabled:
            return None

        if not self._slots.acquire(blocking=False):
            logger.warning(
                "Telemetry backlog full (%d pending), dropping report for %s",
                self.max_pending,
                payload.get("case_id"),
            )
            return None

        try:
            future = self._executor.submit(self._send, payload)
        except RuntimeError:
            self._slots.release()
            raise
        future.add_done_callback(_log_failure)
        return future

    def _send(self, payload: dict[str, Any]) -> bool:
        try:
            return self.client.post_report(payload)
        finally:
            self._slots.release()

    def shutdown(self, wait: bool = True) -> None:
        self._executor.shutdown(wait=wait)


def _log_failure(future: Future) -> None:
    error = future.exception()
    if error is not None:
        logger.error("Telemetry reporting raised: %s", str(error))
