import os
from typing import Any, Dict, Optional

POKEAPI_BASE = os.getenv("POKEAPI_BASE", "https://pokeapi.co/api/v2")
POKEAPI_TIMEOUT = float(os.getenv("POKEAPI_TIMEOUT", "12.0"))
POKEAPI_CONCURRENCY = int(os.getenv("POKEAPI_CONCURRENCY", "16"))
POKEAPI_PAGE_SIZE = int(os.getenv("POKEAPI_PAGE_SIZE", "2000"))

GEMINI_API_BASE = os.getenv("GEMINI_API_BASE", "https://generativelanguage.googleapis.com/v1beta")
GEMINI_MODEL = os.getenv("GEMINI_MODEL", "gemini-2.0-flash")

# Set POKEDEX_WARMUP=false to skip building indices on startup (tests, cold CLI runs)
POKEDEX_WARMUP = os.getenv("POKEDEX_WARMUP", "true").lower() in {"1", "true", "yes"}

PUBLIC_PREFIX = "POKEDEX_PUBLIC_"


def get_server_secret(key: str, default: Optional[Any] = None) -> Any:
    """Read a server-side secret from the environment.
    Do not expose these to clients.
    """
    return os.getenv(key, default)


def scanner_enabled() -> bool:
    return bool(get_server_secret("GEMINI_API_KEY"))


def _allowlisted_public_from_env() -> Dict[str, Any]:
    """Expose only safe, intentionally public values from env.
    Keys beginning with POKEDEX_PUBLIC_ are considered safe to ship to clients.
    """
    out: Dict[str, Any] = {}
    for k, v in os.environ.items():
        if k.startswith(PUBLIC_PREFIX):
            out[k] = v
    return out


def get_public_config() -> Dict[str, Any]:
    """Return public configuration for clients."""
    public: Dict[str, Any] = {
        "scanner_enabled": scanner_enabled(),
        "pokeapi_base": POKEAPI_BASE,
    }
    # Env wins as an override
    public.update(_allowlisted_public_from_env())
    return public
