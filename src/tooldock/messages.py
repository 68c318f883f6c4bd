"""
User-facing Messages — short localized strings.

Only these strings ever reach the end user. Provider HTTP codes and
stack traces stay in the log.
"""

from typing import Dict

DEFAULT_LANGUAGE = "en"

_MESSAGES: Dict[str, Dict[str, str]] = {
    "en": {
        "unknown_tool": "I don't know how to do that ({tool}).",
        "missing_args": "Missing details for {tool}: {fields}.",
        "invalid_args": "Some details for {tool} look wrong.",
        "provider_failed": "{provider} couldn't complete the request. Please try again.",
        "all_providers_failed": "None of the services could complete the request right now.",
        "generic_error": "Something went wrong. Please try again.",
        "duplicate_call": "That was already done in this turn.",
        "cancelled": "The request was cancelled.",
        "task_accepted": "Working on it, I'll send the result when it's ready.",
        "no_media": "Please attach or quote the {media} to use.",
    },
    "he": {
        "unknown_tool": "אני לא יודע לבצע את זה ({tool}).",
        "missing_args": "חסרים פרטים עבור {tool}: {fields}.",
        "invalid_args": "חלק מהפרטים עבור {tool} לא תקינים.",
        "provider_failed": "{provider} לא הצליח להשלים את הבקשה. נסה שוב.",
        "all_providers_failed": "אף שירות לא הצליח להשלים את הבקשה כרגע.",
        "generic_error": "משהו השתבש. נסה שוב.",
        "duplicate_call": "הפעולה הזו כבר בוצעה.",
        "cancelled": "הבקשה בוטלה.",
        "task_accepted": "עובד על זה, אשלח את התוצאה כשתהיה מוכנה.",
        "no_media": "צרף או צטט את ה{media} שברצונך להשתמש בו.",
    },
}


def message(key: str, language: str = DEFAULT_LANGUAGE, **params) -> str:
    """
    Look up a localized message and fill its placeholders.

    Unknown languages fall back to English; unknown keys fall back to the
    generic error text.
    """
    table = _MESSAGES.get((language or DEFAULT_LANGUAGE).lower(), _MESSAGES[DEFAULT_LANGUAGE])
    template = table.get(key) or _MESSAGES[DEFAULT_LANGUAGE].get(key) or table["generic_error"]
    try:
        return template.format(**params)
    except (KeyError, IndexError):
        return template


def supported_languages() -> list:
    return sorted(_MESSAGES)
