import asyncio

import pytest

from tooldock.tasks import TaskStatus
from tooldock.tools import ToolContext, cloned_voice
from tooldock.tools.base import QuotedMedia
from tests.fakes import FakeProvider


def test_catalogue_is_complete(registry):
    assert set(registry.list_names()) == {
        "create_image", "edit_image", "create_video", "image_to_video", "edit_video",
        "create_music", "text_to_speech", "transcribe_audio", "translate_text",
        "translate_and_speak", "send_location", "create_poll", "retry_with_fallback",
    }


@pytest.mark.asyncio
async def test_create_image_uses_default_provider(registry, clients, ctx):
    result = await registry.invoke("create_image", {"prompt": "a red fox"}, ctx)
    assert result.success
    assert result.provider == "gemini"
    assert result.media_urls.image == "https://cdn.test/gemini/image.png"
    assert clients["openai"].calls == []


@pytest.mark.asyncio
async def test_create_video_falls_back_when_default_fails(registry, clients, ctx):
    clients["grok"].fail = True
    result = await registry.invoke("create_video", {"prompt": "a dog running"}, ctx)
    assert result.success
    assert result.provider == "openai"
    assert result.providers_tried == ["grok", "openai"]


@pytest.mark.asyncio
async def test_explicit_provider_is_not_silently_replaced(registry, clients, ctx):
    clients["openai"].fail = True
    result = await registry.invoke("create_video", {"prompt": "x", "provider": "sora"}, ctx)
    assert result.success is False
    assert "OpenAI" in result.error
    assert "500" not in result.error
    assert clients["grok"].calls == []


@pytest.mark.asyncio
async def test_all_providers_failing(registry, clients, ctx):
    for name in ("gemini", "openai", "grok"):
        clients[name].fail = True
    result = await registry.invoke("create_image", {"prompt": "x"}, ctx)
    assert result.success is False
    assert result.providers_tried == ["gemini", "openai", "grok"]


@pytest.mark.asyncio
async def test_edit_image_uses_quoted_media(registry, clients):
    ctx = ToolContext(chat_id="c", quoted_media=QuotedMedia(kind="image", url="https://wa.test/in.jpg"))
    result = await registry.invoke("edit_image", {"prompt": "add a hat"}, ctx)
    assert result.success
    assert clients["gemini"].calls[0] == ("edit_image", "https://wa.test/in.jpg", "add a hat")


@pytest.mark.asyncio
async def test_media_tools_need_media(registry, ctx):
    result = await registry.invoke("image_to_video", {"prompt": "make it move"}, ctx)
    assert result.success is False
    assert "image" in result.error


@pytest.mark.asyncio
async def test_create_music_is_accepted_then_completed_by_callback(registry, reconciler, store, ctx):
    result = await registry.invoke("create_music", {"prompt": "lofi beats", "style": "chill"}, ctx)
    assert result.success
    assert result.pending is True

    task = await store.get(result.task_id)
    assert task.status == TaskStatus.PENDING
    assert task.chat_id == ctx.chat_id

    done = await reconciler.on_external_callback(
        "suno", {"data": {"task_id": "job-1", "audio_url": "https://cdn.test/song.mp3"}}
    )
    assert done.id == result.task_id
    assert done.status == TaskStatus.DONE


@pytest.mark.asyncio
async def test_transcribe_and_translate(registry, ctx):
    audio_ctx = ToolContext(chat_id="c", quoted_media=QuotedMedia(kind="audio", url="https://wa.test/v.ogg"))
    transcript = await registry.invoke("transcribe_audio", {}, audio_ctx)
    assert transcript.data == "hello from the recording"
    assert transcript.provider == "elevenlabs"

    translated = await registry.invoke("translate_text", {"text": "hello", "target_language": "he"}, ctx)
    assert translated.data == "[he] hello"
    assert translated.provider == "gemini"


@pytest.mark.asyncio
async def test_translate_and_speak_releases_cloned_voice(registry, clients):
    ctx = ToolContext(chat_id="c", quoted_media=QuotedMedia(kind="audio", url="https://wa.test/v.ogg"))
    result = await registry.invoke(
        "translate_and_speak", {"text": "hi", "target_language": "fr", "clone_voice": True}, ctx
    )
    assert result.success
    assert result.media_urls.audio == "https://cdn.test/elevenlabs/speech.mp3"
    assert clients["elevenlabs"].deleted_voices == ["voice-42"]


@pytest.mark.asyncio
async def test_cloned_voice_released_even_when_speech_fails(caplog):
    client = FakeProvider("elevenlabs")
    client.fail_delete = True
    with pytest.raises(RuntimeError):
        async with cloned_voice(client, "https://wa.test/v.ogg") as voice_id:
            assert voice_id == "voice-42"
            raise RuntimeError("speech failed")
    assert "Could not delete cloned voice" in caplog.text


@pytest.mark.asyncio
async def test_cleanup_failure_does_not_change_outcome(registry, clients):
    clients["elevenlabs"].fail_delete = True
    ctx = ToolContext(chat_id="c", quoted_media=QuotedMedia(kind="audio", url="https://wa.test/v.ogg"))
    result = await registry.invoke(
        "translate_and_speak", {"text": "hi", "target_language": "fr", "clone_voice": True}, ctx
    )
    assert result.success


@pytest.mark.asyncio
async def test_send_location_goes_straight_to_the_channel(registry, channel, ctx):
    result = await registry.invoke("send_location", {"region": "israel"}, ctx)
    assert result.success
    kind, chat_id, lat, lng = channel.sent[0]
    assert kind == "location"
    assert 29.5 <= lat <= 33.3
    assert 34.3 <= lng <= 35.9


@pytest.mark.asyncio
async def test_create_poll_validates_options(registry, channel, ctx):
    bad = await registry.invoke("create_poll", {"question": "Pizza?", "options": ["yes", "  "]}, ctx)
    assert bad.success is False

    ok = await registry.invoke("create_poll", {"question": "Pizza?", "options": ["yes", "no"]}, ctx)
    assert ok.success
    assert channel.texts == ["📊 Pizza?\n1. yes\n2. no"]


@pytest.mark.asyncio
async def test_retry_with_fallback_walks_remaining_chain(registry, clients, ctx):
    clients["openai"].fail = True
    result = await registry.invoke(
        "retry_with_fallback",
        {"tool": "create_video", "arguments": {"prompt": "a dog"}, "provider_tried": "kling"},
        ctx,
    )
    assert result.success
    assert result.provider == "gemini"
    assert result.providers_tried == ["grok", "openai", "gemini"]


@pytest.mark.asyncio
async def test_retry_with_fallback_exhausted(registry, ctx):
    result = await registry.invoke(
        "retry_with_fallback",
        {"tool": "create_video", "arguments": {"prompt": "a dog"}, "providers_tried": ["grok", "openai", "gemini"]},
        ctx,
    )
    assert result.success is False


@pytest.mark.asyncio
async def test_retry_with_fallback_refuses_itself(registry, ctx):
    result = await registry.invoke("retry_with_fallback", {"tool": "retry_with_fallback"}, ctx)
    assert result.success is False


@pytest.mark.asyncio
async def test_cancelled_context_stops_provider_calls(registry, clients):
    event = asyncio.Event()
    event.set()
    ctx = ToolContext(chat_id="c", cancel_event=event)
    result = await registry.invoke("create_image", {"prompt": "x"}, ctx)
    assert result.success is False
    assert result.error_code == "cancelled"
    assert clients["gemini"].calls == []
