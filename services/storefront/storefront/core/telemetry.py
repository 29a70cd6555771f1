"""
Telemetry sinks for storefront traces, events and exceptions.

The logging sink is the default. The Kafka sink publishes one JSON message per
call to ``TELEMETRY_TOPIC`` keyed by the event name.
"""
import logging
import time
from abc import ABC, abstractmethod
from datetime import datetime
from typing import Dict, Optional

from kafka.errors import KafkaError

from storefront.core.config import settings

logger = logging.getLogger("storefront.telemetry")


class TelemetryProvider(ABC):
    @abstractmethod
    def track_trace(self, message: str) -> None:
        raise NotImplementedError

    @abstractmethod
    def track_event(
        self,
        name: str,
        properties: Optional[Dict[str, str]] = None,
        measurements: Optional[Dict[str, float]] = None,
    ) -> None:
        raise NotImplementedError

    @abstractmethod
    def track_exception(self, exc: BaseException) -> None:
        raise NotImplementedError


class LoggingTelemetryProvider(TelemetryProvider):
    def track_trace(self, message):
        logger.info("trace %s", message)

    def track_event(self, name, properties=None, measurements=None):
        logger.info("event %s properties=%s measurements=%s", name, properties or {}, measurements or {})

    def track_exception(self, exc):
        logger.error("exception %s: %s", type(exc).__name__, exc)


class KafkaTelemetryProvider(TelemetryProvider):
    def __init__(self, topic: str = settings.TELEMETRY_TOPIC):
        from storefront.kafka import producer
        self.topic = topic
        self._send = producer.send

    def _emit(self, kind: str, name: str, **payload):
        payload.update({"kind": kind, "name": name, "timestamp": datetime.utcnow().isoformat()})
        try:
            self._send(self.topic, key=name, value=payload, flush=False)
        except KafkaError as exc:
            logger.warning("Telemetry %s %s not published: %s", kind, name, exc)

    def track_trace(self, message):
        self._emit("trace", message)

    def track_event(self, name, properties=None, measurements=None):
        self._emit("event", name, properties=properties or {}, measurements=measurements or {})

    def track_exception(self, exc):
        self._emit("exception", type(exc).__name__, message=str(exc))


def create_telemetry_provider(sink: str = settings.TELEMETRY_SINK) -> TelemetryProvider:
    if sink == "kafka":
        return KafkaTelemetryProvider()
    if sink != "log":
        logger.warning("Unknown TELEMETRY_SINK %r, falling back to logging", sink)
    return LoggingTelemetryProvider()


class Stopwatch:
    """Measures elapsed wall time for ``ElapsedMilliseconds`` measurements."""

    def __init__(self):
        self.started = time.perf_counter()

    def measurements(self) -> Dict[str, float]:
        return {"ElapsedMilliseconds": (time.perf_counter() - self.started) * 1000.0}
