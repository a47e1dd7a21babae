"""Configuration constants, API defaults, and .env loading.

WHY: Centralizes all configurable values so they are easy to find,
update, and override. Provider endpoints, model names, and paging
defaults are plain module-level values, not buried in logic, so the
CLI, the HTTP server, and the tests all read the same settings.

HOW: python-dotenv loads the .env file on import. Constants are defined
as module-level values with environment overrides. The load_*_api_key()
functions provide a clear error when a key is missing, and
api_key_status() reports which providers are usable without leaking
the keys themselves.

RULES:
- API keys are loaded from .env via python-dotenv, never hardcoded
- All defaults can be overridden via environment variables
- Missing keys raise ValueError with a human-readable message
- Masked keys show only the first and last four characters
"""

from __future__ import annotations

import os

from dotenv import load_dotenv

# Load .env from the project root (where the script is run from)
load_dotenv()

# ---------------------------------------------------------------------------
# Transcript view defaults
# ---------------------------------------------------------------------------

WORDS_PER_PAGE = int(os.getenv("WORDS_PER_PAGE", "150"))
"""Default number of words shown on one transcript page."""

NOTES_EXPORT_FILENAME = "transcript-notes.txt"

# ---------------------------------------------------------------------------
# Feed retrieval
# ---------------------------------------------------------------------------

FEED_TIMEOUT_S = float(os.getenv("FEED_TIMEOUT_S", "10"))
MAX_FEED_ITEMS = int(os.getenv("MAX_FEED_ITEMS", "25"))
FEED_PROXY_URL = os.getenv("FEED_PROXY_URL", "https://api.allorigins.win/raw?url=")

# ---------------------------------------------------------------------------
# Provider configuration defaults
# ---------------------------------------------------------------------------

DEEPGRAM_BASE_URL = os.getenv("DEEPGRAM_BASE_URL", "https://api.deepgram.com/v1")
DEEPGRAM_MODEL = os.getenv("DEEPGRAM_MODEL", "nova-2")

OPENAI_MODEL = os.getenv("OPENAI_MODEL", "gpt-3.5-turbo")
ANTHROPIC_MODEL = os.getenv("ANTHROPIC_MODEL", "claude-3-5-sonnet-20240620")
CHAT_MAX_TOKENS = int(os.getenv("CHAT_MAX_TOKENS", "1024"))


def _load_key(env_name: str, provider: str) -> str:
    key = os.getenv(env_name, "").strip()
    if not key:
        raise ValueError(
            "{} API key not configured. "
            "Add {} to the .env file in the app folder.".format(provider, env_name)
        )
    return key


def load_deepgram_api_key() -> str:
    """Load the Deepgram API key from the environment.

    RULES:
    - Raises ValueError if the key is missing or empty
    - Never returns a default/placeholder value
    """
    return _load_key("DEEPGRAM_API_KEY", "Deepgram")


def load_openai_api_key() -> str:
    """Load the OpenAI API key from the environment."""
    return _load_key("OPENAI_API_KEY", "OpenAI")


def load_anthropic_api_key() -> str:
    """Load the Anthropic API key from the environment."""
    return _load_key("ANTHROPIC_API_KEY", "Anthropic")


def mask_key(key: str) -> str:
    """Return ``abcd...wxyz`` for display in status reports."""
    return "{}...{}".format(key[:4], key[-4:])


def api_key_status() -> dict[str, dict[str, object]]:
    """Report which chat providers have keys configured.

    WHY: The chat UI lets the user pick a provider; it needs to know which
    ones will work before sending a request.

    HOW: Reads the key env vars at call time (so tests can monkeypatch
    them) and masks any value found.

    RULES:
    - anthropic/openai: configured flag, masked key or None, and a note
    - demo: always configured, no key required
    """
    status: dict[str, dict[str, object]] = {}
    for name, env_name, note in (
        ("anthropic", "ANTHROPIC_API_KEY", "Requires paid credits"),
        ("openai", "OPENAI_API_KEY", "Free tier available with API key"),
    ):
        key = os.getenv(env_name, "").strip()
        status[name] = {
            "configured": bool(key),
            "key": mask_key(key) if key else None,
            "note": note,
        }
    status["demo"] = {
        "configured": True,
        "key": "Not required for demo",
        "note": "Demo implementation (no API key needed)",
    }
    return status
