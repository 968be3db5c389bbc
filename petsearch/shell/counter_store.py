"""Alert Counter Store - Imperative Shell.

This module persists per-channel daily alert counts. Reserving a slot
is a single atomic compare-and-increment so concurrent dispatches can
never push a channel past its daily limit.

Limit checks are in core/rate_limit.py.
"""

import logging
import threading
from abc import ABC, abstractmethod
from datetime import datetime, timezone
from typing import Any

from google.cloud import firestore
from google.cloud.firestore_v1.base_query import FieldFilter

from petsearch.core.channels import CHANNEL_CONFIGS, ChannelId
from petsearch.core.config import CounterStoreConfig
from petsearch.core.rate_limit import (
    DailyAlertCounts,
    RateLimitResult,
    check_rate_limit,
    record_alert,
)


logger = logging.getLogger(__name__)


STORE_UNAVAILABLE = "Alert counter store unavailable"


class AlertCounterStore(ABC):
    """Per-channel, per-day alert counters."""

    @abstractmethod
    def counts_for_day(self, day: str) -> DailyAlertCounts:
        """Get every channel's count for a day."""

    def count(self, channel_id: ChannelId, day: str) -> int:
        return self.counts_for_day(day).count(channel_id)

    @abstractmethod
    def try_increment(self, channel_id: ChannelId, day: str) -> RateLimitResult:
        """Atomically reserve one alert slot if the channel is under its limit.

        Returns:
            RateLimitResult; channel_count is the count before the attempt
        """


class InMemoryAlertCounterStore(AlertCounterStore):
    """Process-local counters guarded by a lock.

    Only the current day is kept; older days are dropped when a new day
    is first seen.
    """

    def __init__(self) -> None:
        self._lock = threading.Lock()
        self._counts: dict[str, DailyAlertCounts] = {}

    def _day_counts(self, day: str) -> DailyAlertCounts:
        if day not in self._counts:
            self._counts = {
                d: c for d, c in self._counts.items() if d > day
            }
            self._counts[day] = DailyAlertCounts(day=day)
        return self._counts[day]

    def counts_for_day(self, day: str) -> DailyAlertCounts:
        with self._lock:
            return self._counts.get(day, DailyAlertCounts(day=day))

    def try_increment(self, channel_id: ChannelId, day: str) -> RateLimitResult:
        with self._lock:
            counts = self._day_counts(day)
            result = check_rate_limit(channel_id, counts.count(channel_id))
            if result.allowed:
                self._counts[day] = record_alert(channel_id, counts)
            return result


@firestore.transactional
def _increment_in_transaction(
    transaction: Any,
    doc_ref: Any,
    channel_id: ChannelId,
    day: str,
) -> RateLimitResult:
    snapshot = doc_ref.get(transaction=transaction)
    data = snapshot.to_dict() if snapshot.exists else None
    current = int((data or {}).get("count", 0))

    result = check_rate_limit(channel_id, current)
    if result.allowed:
        transaction.set(doc_ref, {
            "channel": channel_id.value,
            "day": day,
            "count": current + 1,
            "updated_at": datetime.now(timezone.utc),
        })
    return result


class FirestoreAlertCounterStore(AlertCounterStore):
    """Counters shared across instances, one document per channel and day.

    Document structure ({day}_{channel}):
    {
        "channel": "push",
        "day": "2024-06-01",
        "count": 3,
        "updated_at": <timestamp>
    }
    """

    def __init__(self, config: CounterStoreConfig | None = None) -> None:
        self.config = config or CounterStoreConfig(backend="firestore")
        self._client: firestore.Client | None = None

    @property
    def client(self) -> firestore.Client:
        """Lazy initialization of Firestore client."""
        if self._client is None:
            kwargs = {}
            if self.config.firestore_database:
                kwargs['database'] = self.config.firestore_database
            self._client = firestore.Client(**kwargs)
        return self._client

    def _collection(self) -> Any:
        return self.client.collection(self.config.firestore_collection)

    def _doc_ref(self, channel_id: ChannelId, day: str) -> Any:
        return self._collection().document(f"{day}_{channel_id.value}")

    def counts_for_day(self, day: str) -> DailyAlertCounts:
        """Fetch every channel's count for a day.

        This method performs database I/O. Errors are logged and treated
        as zero counts.
        """
        try:
            docs = self._collection().where(
                filter=FieldFilter("day", "==", day)
            ).stream()

            counts: dict[ChannelId, int] = {}
            for doc in docs:
                data = doc.to_dict() or {}
                try:
                    channel_id = ChannelId(data.get("channel"))
                except ValueError:
                    logger.warning("Ignoring counter for unknown channel: %s", data.get("channel"))
                    continue
                counts[channel_id] = int(data.get("count", 0))

            return DailyAlertCounts(day=day, alerts_per_channel=counts)

        except Exception as e:
            logger.error("Failed to fetch alert counts for %s: %s", day, str(e))
            return DailyAlertCounts(day=day)

    def try_increment(self, channel_id: ChannelId, day: str) -> RateLimitResult:
        """Reserve a slot inside a Firestore transaction.

        This method performs database I/O. If Firestore is unreachable the
        slot is refused.
        """
        try:
            transaction = self.client.transaction()
            result = _increment_in_transaction(
                transaction,
                self._doc_ref(channel_id, day),
                channel_id,
                day,
            )
        except Exception as e:
            logger.error("Failed to reserve %s alert slot: %s", channel_id.value, str(e))
            limit = CHANNEL_CONFIGS[channel_id].rate_limit_per_day
            return RateLimitResult(
                allowed=False,
                reason=STORE_UNAVAILABLE,
                channel_count=0,
                limit=limit,
            )

        if result.allowed:
            logger.info(
                "Reserved %s alert slot %d/%d for %s",
                channel_id.value,
                result.channel_count + 1,
                result.limit,
                day,
            )
        else:
            logger.warning("Channel %s at daily limit for %s", channel_id.value, day)

        return result


def create_counter_store(config: CounterStoreConfig) -> AlertCounterStore:
    """Build the configured counter store backend."""
    if config.backend == "firestore":
        return FirestoreAlertCounterStore(config)
    return InMemoryAlertCounterStore()
