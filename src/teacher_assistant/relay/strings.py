"""
User-facing strings.

Only English ships; hosts with their own translations can replace entries
in ``STRINGS``.
"""

STRINGS: dict[str, str] = {
    "error": "Error",
    "apirequestfailed": "AI API request failed.",
    "agentnotconfigured": (
        "The AI agent is not properly configured. Please check the plugin settings."
    ),
    "invalidrequest": "Invalid request parameters.",
    "emptyconversation": "The conversation has no messages.",
    "invalidturn": "The conversation contains an invalid message.",
}


def get_string(key: str) -> str:
    """Look up a string, falling back to the key itself."""
    return STRINGS.get(key, key)
