# cart_service/services/event_publisher.py
import asyncio
from datetime import datetime, timezone
from typing import Any, Dict

from celery import Celery
from kombu import Exchange, Queue
from kombu.exceptions import OperationalError
from tenacity import AsyncRetrying, stop_after_attempt, wait_exponential

from cart_service.services.cache_service import dumps
from cart_service.utils.settings import BROKER_CONNECT_TIMEOUT, EVENT_MAX_RETRIES, EVENT_RETRY_DELAY
from cart_service.utils.logging import get_logger

logger = get_logger(__name__)

EVENTS_EXCHANGE = Exchange("events", type="topic", durable=True)
DEAD_LETTER_EXCHANGE = Exchange("dlx", type="direct", durable=True)
DEAD_LETTER_QUEUE = Queue("dlq", DEAD_LETTER_EXCHANGE, routing_key="dlq", durable=True)


class CeleryEventPublisher:
    """
    Publikacja eventow domenowych na brokerze Celery.

    Eventy ida na exchange "events" (topic, routing key = nazwa eventu).
    publish_with_retry ponawia z exponential backoff, a po wyczerpaniu prob
    odklada wiadomosc do kolejki "dlq" i rzuca ostatni blad.

    Gdy broker jest nieosiagalny (sprawdzane przy connect albo przy pierwszym
    evencie) publisher przechodzi w fallback: eventy trafiaja tylko do logu.
    """

    def __init__(
        self,
        celery_app: Celery,
        max_retries: int = EVENT_MAX_RETRIES,
        retry_delay: float = EVENT_RETRY_DELAY,
        sleep=asyncio.sleep,
    ):
        self.celery_app = celery_app
        self.max_retries = max_retries
        self.retry_delay = retry_delay
        self._sleep = sleep
        # None = jeszcze nie sprawdzano brokera
        self.fallback_mode: bool | None = None

    async def connect(self) -> None:
        try:
            await asyncio.to_thread(self._check_broker)
        except (OperationalError, OSError) as e:
            logger.warning(f"Broker niedostepny ({e}), eventy tylko w logu")
            self.fallback_mode = True
            return

        self.fallback_mode = False
        logger.info("Event publisher connected to broker")

    def _check_broker(self) -> None:
        with self.celery_app.connection_for_write() as conn:
            conn.ensure_connection(max_retries=1, interval_start=0, timeout=BROKER_CONNECT_TIMEOUT)

    async def publish(self, event_name: str, payload: Dict[str, Any]) -> None:
        if self.fallback_mode is None:
            await self.connect()
        if self.fallback_mode:
            logger.info(f"[FALLBACK] Event {event_name}: {dumps(payload)}")
            return

        message = {
            "event": event_name,
            "payload": payload,
            "timestamp": datetime.now(timezone.utc).isoformat(),
        }
        try:
            await asyncio.to_thread(
                self._send,
                message,
                EVENTS_EXCHANGE,
                event_name,
                {"x-retry-count": 0, "x-max-retries": self.max_retries},
            )
        except Exception as e:
            logger.error(f"Error publishing event {event_name}: {e}")
            raise

        logger.info(f"Event published: {event_name}")

    async def publish_with_retry(
        self,
        event_name: str,
        payload: Dict[str, Any],
        max_retries: int | None = None,
    ) -> None:
        retries = self.max_retries if max_retries is None else max_retries

        try:
            async for attempt in AsyncRetrying(
                reraise=True,
                stop=stop_after_attempt(retries + 1),
                wait=wait_exponential(multiplier=self.retry_delay),
                before_sleep=lambda state: logger.info(
                    f"Retry attempt {state.attempt_number}/{retries} for event {event_name}"
                ),
                sleep=self._sleep,
            ):
                with attempt:
                    await self.publish(event_name, payload)
        except Exception as e:
            logger.error(f"Failed to publish event {event_name} after {retries} retries")
            await self._send_to_dead_letter(event_name, payload, e)
            raise

    async def _send_to_dead_letter(self, event_name: str, payload: Dict[str, Any], error: Exception) -> None:
        message = {
            "event": event_name,
            "payload": payload,
            "error": str(error),
            "timestamp": datetime.now(timezone.utc).isoformat(),
        }
        try:
            await asyncio.to_thread(self._send, message, DEAD_LETTER_EXCHANGE, "dlq", None, [DEAD_LETTER_QUEUE])
            logger.info(f"Event sent to dead letter queue: {event_name}")
        except Exception as e:
            # dlq to ostatnia deska ratunku, blad tylko logujemy
            logger.error(f"Error sending {event_name} to DLQ: {e}")

    def _send(self, message: Dict[str, Any], exchange: Exchange, routing_key: str, headers=None, declare=None) -> None:
        with self.celery_app.producer_or_acquire() as producer:
            producer.publish(
                dumps(message),
                exchange=exchange,
                routing_key=routing_key,
                declare=declare or [exchange],
                content_type="application/json",
                content_encoding="utf-8",
                delivery_mode=2,
                headers=headers or {},
                retry=False,
            )
