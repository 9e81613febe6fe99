"""
Runtime configuration read from environment variables.

Values are read lazily so that ``load_dotenv()`` in main.py has run by the
time any of them is needed.
"""
import os

_LLM_DEFAULTS = {
    "openai":    "gpt-4o-mini",
    "gemini":    "gemini-2.5-flash",
    "anthropic": "claude-sonnet-4-20250514",
}


def llm_name() -> str:
    """Return the litellm model string (provider/model format)."""
    provider = os.getenv("LLM_PROVIDER", "openai").lower().strip()
    if provider not in _LLM_DEFAULTS:
        provider = "openai"
    model = os.getenv("LLM_MODEL", _LLM_DEFAULTS[provider])
    if provider == "openai":
        return model  # litellm uses bare model name for OpenAI
    return f"{provider}/{model}"


def llm_timeout() -> float:
    return float(os.getenv("LLM_TIMEOUT", "60"))


def http_timeout() -> float:
    return float(os.getenv("HTTP_TIMEOUT", "10"))


def geocode_fallback() -> str:
    """'nominatim' (live lookup) or 'default' (default region)."""
    value = os.getenv("GEOCODE_FALLBACK", "nominatim").lower().strip()
    return value if value in ("nominatim", "default") else "nominatim"


def nominatim_user_agent() -> str:
    # Nominatim rejects requests without an explicit User-Agent
    return os.getenv("NOMINATIM_USER_AGENT", "travel-agent-planner/1.0")


def database_url() -> str:
    return os.getenv("DATABASE_URL", "sqlite:///./travel_agent.db")


def log_level() -> str:
    return os.getenv("LOG_LEVEL", "INFO").upper()
