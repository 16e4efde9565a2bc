"""Dramatiq task definitions for async operations."""
import dramatiq
from dramatiq.brokers.redis import RedisBroker
from dramatiq.brokers.stub import StubBroker
from legal_insights.config import get_settings

settings = get_settings()

# Configure broker; the stub broker keeps messages in memory for tests
if settings.task_broker == "stub":
    broker = StubBroker()
else:
    broker = RedisBroker(url=settings.redis_url)
dramatiq.set_broker(broker)

from .audio import generate_audio_overview_task
from .maintenance import purge_expired_permissions_task

__all__ = [
    'broker',
    'generate_audio_overview_task',
    'purge_expired_permissions_task',
]
