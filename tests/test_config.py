import json

import pytest

from tooldock.config import ToolDockConfig, load_config
from tooldock.messages import message, supported_languages
from tooldock.utils import dig

ENV_VARS = [
    "TOOLDOCK_CONFIG_PATH", "HOST", "PORT", "PUBLIC_BASE_URL", "LOG_LEVEL",
    "WHATSAPP_API_URL", "WHATSAPP_API_TOKEN", "WHATSAPP_PHONE_NUMBER_ID", "WHATSAPP_VERIFY_TOKEN",
]


@pytest.fixture(autouse=True)
def clean_env(monkeypatch, tmp_path):
    for var in ENV_VARS:
        monkeypatch.delenv(var, raising=False)
    monkeypatch.setenv("HOME", str(tmp_path))


def test_defaults():
    config = ToolDockConfig()
    assert config.providers.fallback_order["video"] == ["grok", "openai", "gemini"]
    assert config.acks.self_acknowledging == ["send_location"]
    assert config.tasks.correlation_paths[0] == "data.task_id"
    assert config.dispatch.parallel is False


def test_load_without_file_uses_defaults():
    config = load_config()
    assert config.gateway.port == 18789


def test_load_yaml(tmp_path):
    path = tmp_path / "tooldock.yaml"
    path.write_text(
        "gateway:\n"
        "  public_base_url: https://bot.example.com\n"
        "providers:\n"
        "  fallback_order:\n"
        "    video: [openai, grok]\n"
        "  aliases:\n"
        "    my-video: openai\n"
        "acks:\n"
        "  language: he\n"
    )
    config = load_config(str(path))
    assert config.gateway.public_base_url == "https://bot.example.com"
    assert config.providers.fallback_order == {"video": ["openai", "grok"]}
    assert config.providers.aliases == {"my-video": "openai"}
    assert config.acks.language == "he"


def test_load_json_via_env_path(tmp_path, monkeypatch):
    path = tmp_path / "custom.json"
    path.write_text(json.dumps({"dispatch": {"parallel": True}}))
    monkeypatch.setenv("TOOLDOCK_CONFIG_PATH", str(path))
    assert load_config().dispatch.parallel is True


def test_default_location_in_home(tmp_path):
    (tmp_path / ".tooldock").mkdir()
    (tmp_path / ".tooldock" / "tooldock.json").write_text(json.dumps({"gateway": {"port": 9000}}))
    assert load_config().gateway.port == 9000


def test_env_overrides_file(tmp_path, monkeypatch):
    path = tmp_path / "tooldock.json"
    path.write_text(json.dumps({"gateway": {"port": 9000, "host": "0.0.0.0"}}))
    monkeypatch.setenv("PORT", "9100")
    monkeypatch.setenv("WHATSAPP_API_TOKEN", "secret")
    config = load_config(str(path))
    assert config.gateway.port == 9100
    assert config.gateway.host == "0.0.0.0"
    assert config.channel.api_token == "secret"


def test_broken_file_falls_back_to_defaults(tmp_path):
    path = tmp_path / "tooldock.json"
    path.write_text("{not valid json")
    assert load_config(str(path)).gateway.port == 18789


def test_messages_fall_back():
    assert "create_video" in message("unknown_tool", "en", tool="create_video")
    assert message("cancelled", "xx") == message("cancelled", "en")
    assert message("no_such_key") == message("generic_error")
    assert message("unknown_tool", "en") == "I don't know how to do that ({tool})."
    assert supported_languages() == ["en", "he"]


def test_dig():
    data = {"data": {"task_id": "a", "nested": {"x": 1}}}
    assert dig(data, "data.task_id") == "a"
    assert dig(data, "data.nested.x") == 1
    assert dig(data, "data.missing") is None
    assert dig("not a dict", "data") is None
