import pytest

from tooldock.acks import AckDispatcher
from tooldock.config import ToolDockConfig
from tooldock.providers import FallbackOrchestrator, ProviderHub, ProviderNormalizer
from tooldock.tasks import CallbackReconciler, ReconciliationMap, TaskStore
from tooldock.tools import build_default_registry
from tooldock.tools.base import ToolContext
from tests.fakes import FakeChannel, default_clients


@pytest.fixture
def config():
    return ToolDockConfig()


@pytest.fixture
def normalizer(config):
    return ProviderNormalizer.from_config(config.providers)


@pytest.fixture
def orchestrator(config, normalizer):
    return FallbackOrchestrator.from_config(config.providers, normalizer=normalizer)


@pytest.fixture
def clients():
    return default_clients()


@pytest.fixture
def hub(clients, normalizer):
    return ProviderHub(clients, normalizer=normalizer)


@pytest.fixture
def channel():
    return FakeChannel()


@pytest.fixture
def store():
    return TaskStore()


@pytest.fixture
def reconciler(store, hub):
    return CallbackReconciler(store, ReconciliationMap(), hub, public_base_url="https://hooks.test")


@pytest.fixture
def registry(hub, orchestrator, reconciler, channel):
    return build_default_registry(hub, orchestrator, reconciler, channel)


@pytest.fixture
def acks(normalizer, orchestrator, config):
    return AckDispatcher(normalizer, orchestrator, config.acks)


@pytest.fixture
def ctx():
    return ToolContext(chat_id="972500000000", language="en", original_text="hi")
