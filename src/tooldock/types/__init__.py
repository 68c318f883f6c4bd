"""
Shared type aliases and constants used across ToolDock modules.
"""

# ─── Type Aliases ─────────────────────────────────────────────────

# Canonical lowercase provider id ("gemini", "openai", "grok", ...)
ProviderKey = str

# Capability class used for fallback ordering ("image", "video", ...)
Capability = str

# Locally issued async task id
TaskId = str

# ─── Constants ────────────────────────────────────────────────────

# Slot in ACK templates that receives the provider display name
PROVIDER_SLOT = "__PROVIDER__"
