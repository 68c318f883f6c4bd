import pytest

from tooldock.errors import ProviderError
from tooldock.providers import FallbackOrchestrator, ProviderHub, ProviderNormalizer, try_providers
from tests.fakes import FakeProvider


# ─── Normalizer ──────────────────────────────────────────────────

@pytest.mark.parametrize(
    "raw, expected",
    [
        ("Gemini", "gemini"),
        ("  VEO3 ", "gemini"),
        ("sora-2-pro", "openai"),
        ("kling", "grok"),
        ("11labs", "elevenlabs"),
        ("kie", "suno"),
        ("SomethingNew", "somethingnew"),
        ("", None),
        ("   ", None),
        (None, None),
    ],
)
def test_normalize(normalizer, raw, expected):
    assert normalizer.normalize(raw) == expected


@pytest.mark.parametrize("raw", ["veo", "Sora", "xai", "unknown-thing", "GEMINI", "whisper"])
def test_normalize_is_idempotent(normalizer, raw):
    once = normalizer.normalize(raw)
    assert normalizer.normalize(once) == once


def test_chained_aliases_stay_idempotent():
    normalizer = ProviderNormalizer(extra_aliases={"fast": "turbo", "turbo": "grok", "loop-a": "loop-b", "loop-b": "loop-a"})
    assert normalizer.normalize("fast") == "grok"
    assert normalizer.normalize(normalizer.normalize("fast")) == "grok"
    for raw in ("loop-a", "loop-b"):
        once = normalizer.normalize(raw)
        assert normalizer.normalize(once) == once


def test_normalize_never_raises_on_odd_input(normalizer):
    assert normalizer.normalize(42) == "42"
    assert normalizer.normalize(["gemini"]) is not None


def test_display_name(normalizer):
    assert normalizer.display_name("openai") == "OpenAI"
    assert normalizer.display_name("sora") == "OpenAI"
    assert normalizer.display_name("acme") == "Acme"
    assert normalizer.display_name(None) == ""


def test_display_name_override():
    normalizer = ProviderNormalizer(display_names={"veo": "Veo 3"})
    assert normalizer.display_name("gemini") == "Veo 3"


def test_default_provider_for(normalizer):
    assert normalizer.default_provider_for("create_video") == "grok"
    assert normalizer.default_provider_for("create_image") == "gemini"
    assert normalizer.default_provider_for("create_poll") is None


def test_tool_default_override_is_normalized():
    normalizer = ProviderNormalizer(tool_defaults={"create_video": "sora"})
    assert normalizer.default_provider_for("create_video") == "openai"


# ─── Fallback ────────────────────────────────────────────────────

def test_scenario_d_next_provider(orchestrator):
    assert orchestrator.order_for("video") == ["grok", "openai", "gemini"]
    assert orchestrator.next_provider("video", {"grok"}) == "openai"
    assert orchestrator.next_provider("video", {"grok", "openai", "gemini"}) is None


def test_next_provider_normalizes_tried(orchestrator):
    assert orchestrator.next_provider("video", {"Kling", "sora"}) == "gemini"


def test_next_provider_unknown_capability(orchestrator):
    assert orchestrator.next_provider("teleportation", set()) is None


@pytest.mark.parametrize(
    "tried",
    [set(), {"grok"}, {"openai"}, {"grok", "gemini"}, {"runway"}, {"grok", "openai", "gemini", "runway"}],
)
def test_next_provider_never_returns_tried(orchestrator, tried):
    proposed = orchestrator.next_provider("video", tried)
    order = set(orchestrator.order_for("video"))
    if order <= tried:
        assert proposed is None
    else:
        assert proposed is not None
        assert proposed not in tried


def test_orders_are_deduplicated_after_normalizing():
    orchestrator = FallbackOrchestrator({"video": ["kling", "grok", "veo", "gemini"]})
    assert orchestrator.order_for("video") == ["grok", "gemini"]


@pytest.mark.asyncio
async def test_try_providers_walks_the_chain(orchestrator):
    attempts = []
    announced = []

    async def attempt(provider):
        attempts.append(provider)
        if provider != "gemini":
            raise ProviderError("down", provider=provider)
        return "ok"

    async def on_fallback(provider):
        announced.append(provider)

    outcome = await try_providers(orchestrator, "video", attempt, on_fallback=on_fallback)
    assert outcome.succeeded
    assert outcome.provider == "gemini"
    assert attempts == ["grok", "openai", "gemini"]
    assert announced == ["openai", "gemini"]
    assert set(outcome.errors) == {"grok", "openai"}


@pytest.mark.asyncio
async def test_try_providers_exhausted(orchestrator):
    async def attempt(provider):
        raise RuntimeError("boom")

    outcome = await try_providers(orchestrator, "image", attempt)
    assert not outcome.succeeded
    assert outcome.tried == ["gemini", "openai", "grok"]


@pytest.mark.asyncio
async def test_try_providers_first_outside_chain(orchestrator):
    attempts = []

    async def attempt(provider):
        attempts.append(provider)
        if provider == "runway":
            raise ProviderError("down", provider=provider)
        return provider

    outcome = await try_providers(orchestrator, "video", attempt, first="runwayml", tried=["grok"])
    assert attempts == ["runway", "openai"]
    assert outcome.result == "openai"


# ─── Hub ─────────────────────────────────────────────────────────

def test_hub_resolves_aliases(normalizer):
    hub = ProviderHub({"veo": FakeProvider("gemini")}, normalizer=normalizer)
    assert hub.has("gemini")
    assert hub.get("google").provider_name == "gemini"
    assert not hub.has("grok")
    with pytest.raises(ProviderError):
        hub.get("grok")


@pytest.mark.asyncio
async def test_unsupported_capability_raises_provider_error():
    client = FakeProvider("suno")
    with pytest.raises(ProviderError):
        await client.edit_video("https://x/v.mp4", "make it blue")
