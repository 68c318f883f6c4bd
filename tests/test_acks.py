import pytest

from tooldock.acks import AckDispatcher, apply_provider, dedupe, template_for
from tooldock.config import AckConfig
from tests.fakes import FakeChannel


# ─── Templates ───────────────────────────────────────────────────

def test_apply_provider_fills_slot():
    assert apply_provider("Creating a video with __PROVIDER__... 🎬", "Grok") == "Creating a video with Grok... 🎬"


@pytest.mark.parametrize(
    "template, expected",
    [
        ("Creating a video with __PROVIDER__... 🎬", "Creating a video... 🎬"),
        ("Rendering using __PROVIDER__", "Rendering"),
        ("Upscaling via __PROVIDER__!", "Upscaling!"),
        ("יוצר וידאו עם __PROVIDER__... 🎬", "יוצר וידאו... 🎬"),
        ("__PROVIDER__ is drawing", "is drawing"),
        ("Translating... 🌐", "Translating... 🌐"),
        ("", ""),
    ],
)
def test_apply_provider_strips_slot_and_connector(template, expected):
    assert apply_provider(template, None) == expected
    assert apply_provider(template, "   ") == expected


def test_template_resolution_order():
    assert template_for("create_image", "he").startswith("יוצר תמונה")
    assert template_for("create_image", "fr").startswith("Creating an image")
    assert template_for("mystery_tool", "en") == "Working on it... ⚙️"
    assert template_for("create_image", "en", {"create_image": "Painting!"}) == "Painting!"


def test_dedupe_preserves_first_seen_order():
    assert dedupe(["b", "", "a", "b", "c", "a"]) == ["b", "a", "c"]


# ─── Text derivation ─────────────────────────────────────────────

def test_scenario_a_default_video_provider_in_ack(acks):
    texts = acks.build_acks([{"name": "create_video", "arguments": {"prompt": "a dog running"}}])
    assert len(texts) == 1
    assert "Grok" in texts[0]


def test_explicit_provider_wins(acks):
    [text] = acks.build_acks([{"name": "create_video", "arguments": {"prompt": "x", "provider": "sora-2"}}])
    assert "OpenAI" in text


def test_service_argument_is_honoured(acks):
    [text] = acks.build_acks([{"name": "create_image", "arguments": {"service": "xai"}}])
    assert "Grok" in text


def test_no_provider_strips_slot():
    acks = AckDispatcher(config=AckConfig(templates={"create_poll": "Polling with __PROVIDER__..."}))
    [text] = acks.build_acks([{"name": "create_poll", "arguments": {}}])
    assert text == "Polling..."


def test_self_acknowledging_tools_are_suppressed(acks):
    assert acks.build_acks([{"name": "send_location", "arguments": {}}]) == [""]


def test_skip_list_suppresses(acks):
    texts = acks.build_acks(
        [{"name": "transcribe_audio"}, {"name": "translate_text"}], skip={"transcribe_audio"}
    )
    assert texts[0] == ""
    assert texts[1].startswith("Translating")


def test_fallback_meta_tool_names_next_provider(acks):
    [text] = acks.build_acks([{
        "name": "retry_with_fallback",
        "arguments": {"tool": "create_video", "providers_tried": ["kling"], "provider_tried": "grok"},
    }])
    assert "OpenAI" in text

    [text] = acks.build_acks([{
        "name": "retry_with_fallback",
        "arguments": {"tool": "create_video", "providers_tried": ["grok", "openai", "gemini"]},
    }])
    assert text == "Trying again... 🔄"


@pytest.mark.parametrize("arguments", [
    {"tool": "create_video", "providers_tried": 5},
    {"tool": "create_video", "capability": ["video"]},
    {"tool": ["create_video"], "providers_tried": {"grok": True}},
])
def test_fallback_meta_tool_with_malformed_arguments(acks, arguments):
    [text] = acks.build_acks([{"name": "retry_with_fallback", "arguments": arguments}])
    assert text.startswith("Trying again")


def test_broken_ack_falls_back_to_generic_text(acks, monkeypatch):
    def explode(call, language=None):
        raise RuntimeError("template store unavailable")

    monkeypatch.setattr(acks, "build_ack", explode)
    texts = acks.build_acks([{"name": "create_image", "arguments": {}}, {"name": "create_video", "arguments": {}}])
    assert texts == ["Working on it... ⚙️", "Working on it... ⚙️"]


def test_hebrew_acks(acks):
    [text] = acks.build_acks([{"name": "create_image", "arguments": {}}], language="he")
    assert text == "יוצר תמונה עם Gemini... 🎨"


# ─── Collapse ────────────────────────────────────────────────────

def test_collapse_one_two_many(acks):
    assert acks.collapse(["a"]) == ["a"]
    assert acks.collapse(["a", "b"]) == ["• a\n• b"]
    assert acks.collapse(["a", "b", "c"]) == ["Working on 3 things... ⚙️"]
    assert acks.collapse(["a", "b", "c"], "he") == ["3 פעולות... ⚙️"]
    assert acks.collapse(["", ""]) == []


def test_collapse_disabled_keeps_each_message():
    acks = AckDispatcher(config=AckConfig(collapse=False))
    assert acks.collapse(["a", "b", "a", "c"]) == ["a", "b", "c"]


def test_identical_texts_count_once_before_collapsing(acks):
    assert acks.collapse(["a", "a", "b"]) == ["• a\n• b"]


def test_disabled_acks_send_nothing(channel):
    acks = AckDispatcher(config=AckConfig(enabled=False))
    assert acks.prepare([{"name": "create_image"}]) == []


# ─── Sending ─────────────────────────────────────────────────────

@pytest.mark.asyncio
async def test_scenario_c_generic_template_sent_once(acks, channel):
    calls = [{"name": "lookup_weather", "arguments": {}}, {"name": "lookup_stocks", "arguments": {}}]
    sent = await acks.acknowledge(channel, "chat-1", calls)
    assert sent == ["Working on it... ⚙️"]
    assert channel.texts == ["Working on it... ⚙️"]


@pytest.mark.asyncio
async def test_send_honours_min_delay():
    sleeps = []

    async def fake_sleep(seconds):
        sleeps.append(seconds)

    acks = AckDispatcher(config=AckConfig(collapse=False), sleep=fake_sleep)
    channel = FakeChannel()
    sent = await acks.send(channel, "chat-1", ["one", "two", "three"], min_delay=1.5)
    assert sent == 3
    assert sleeps == [1.5, 1.5]
    assert channel.texts == ["one", "two", "three"]


@pytest.mark.asyncio
async def test_send_failure_is_swallowed(acks, caplog):
    channel = FakeChannel(fail_texts=True)
    sent = await acks.send(channel, "chat-1", ["hello"])
    assert sent == 0
    assert "Failed to send ACK" in caplog.text
