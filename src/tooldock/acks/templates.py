"""
Per-tool "working on it" texts.

A template may contain one ``__PROVIDER__`` slot. ``apply_provider`` is
the only place that fills it in or removes it.
"""

import re
from typing import Dict, Optional

from ..types import PROVIDER_SLOT

TOOL_ACKS: Dict[str, Dict[str, str]] = {
    "en": {
        "create_image": "Creating an image with __PROVIDER__... 🎨",
        "edit_image": "Editing the image with __PROVIDER__... ✏️",
        "create_video": "Creating a video with __PROVIDER__... 🎬",
        "image_to_video": "Animating the image with __PROVIDER__... 🎞️",
        "edit_video": "Editing the video with __PROVIDER__... 🎞️",
        "create_music": "Composing music with __PROVIDER__... 🎵",
        "text_to_speech": "Converting to speech... 🎤",
        "transcribe_audio": "Transcribing the recording... 🎤📝",
        "translate_text": "Translating... 🌐",
        "translate_and_speak": "Translating and reading aloud... 🗣️",
        "create_poll": "Creating a poll... 📊",
        "send_location": "Sending a location... 📍",
        "retry_with_fallback": "Trying again with __PROVIDER__... 🔄",
    },
    "he": {
        "create_image": "יוצר תמונה עם __PROVIDER__... 🎨",
        "edit_image": "עורך תמונה עם __PROVIDER__... ✏️",
        "create_video": "יוצר וידאו עם __PROVIDER__... 🎬",
        "image_to_video": "ממיר תמונה לווידאו מונפש עם __PROVIDER__... 🎞️",
        "edit_video": "עורך וידאו עם __PROVIDER__... 🎞️",
        "create_music": "יוצר מוזיקה עם __PROVIDER__... 🎵",
        "text_to_speech": "ממיר לדיבור... 🎤",
        "transcribe_audio": "מתמלל הקלטה... 🎤📝",
        "translate_text": "מתרגם... 🌐",
        "translate_and_speak": "מתרגם ומקריא... 🗣️",
        "create_poll": "יוצר סקר... 📊",
        "send_location": "שולח מיקום... 📍",
        "retry_with_fallback": "מנסה שוב עם __PROVIDER__... 🔄",
    },
}

GENERIC_ACK: Dict[str, str] = {
    "en": "Working on it... ⚙️",
    "he": "מבצע... ⚙️",
}

COLLAPSED_ACK: Dict[str, str] = {
    "en": "Working on {count} things... ⚙️",
    "he": "{count} פעולות... ⚙️",
}

BULLET = "• "

# Connector words that only make sense next to a provider name
_CONNECTORS = ("with", "using", "via", "by", "עם", "באמצעות")

_SLOT_WITH_CONNECTOR = re.compile(
    r"\s*\b(?:" + "|".join(re.escape(w) for w in _CONNECTORS) + r")\s+" + re.escape(PROVIDER_SLOT),
    re.IGNORECASE,
)
_BARE_SLOT = re.compile(r"\s*" + re.escape(PROVIDER_SLOT))


def apply_provider(template: str, display_name: Optional[str]) -> str:
    """
    Fill the provider slot, or strip it together with its connector word.

    >>> apply_provider("Creating a video with __PROVIDER__... 🎬", "Grok")
    'Creating a video with Grok... 🎬'
    >>> apply_provider("Creating a video with __PROVIDER__... 🎬", None)
    'Creating a video... 🎬'
    """
    if not template:
        return ""
    if PROVIDER_SLOT not in template:
        return template
    name = (display_name or "").strip()
    if name:
        return template.replace(PROVIDER_SLOT, name)
    text = _SLOT_WITH_CONNECTOR.sub("", template)
    text = _BARE_SLOT.sub("", text)
    return re.sub(r"\s{2,}", " ", text).strip()


def template_for(tool_name: str, language: str = "en", overrides: Optional[Dict[str, str]] = None) -> str:
    """Override → localized template → English template → generic text."""
    if overrides and tool_name in overrides:
        return overrides[tool_name]
    lang = (language or "en").lower()
    table = TOOL_ACKS.get(lang, TOOL_ACKS["en"])
    if tool_name in table:
        return table[tool_name]
    if tool_name in TOOL_ACKS["en"]:
        return TOOL_ACKS["en"][tool_name]
    return generic_ack(lang)


def generic_ack(language: str = "en") -> str:
    return GENERIC_ACK.get((language or "en").lower(), GENERIC_ACK["en"])


def collapsed_ack(count: int, language: str = "en") -> str:
    template = COLLAPSED_ACK.get((language or "en").lower(), COLLAPSED_ACK["en"])
    return template.format(count=count)
