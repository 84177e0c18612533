from typing import Any, Dict, Optional
import re

_SENTENCE_START = re.compile(r"([.?!]\s+)([^\W\d_])")


def normalize(raw: Optional[str]) -> str:
    """Clean and sentence-case PokeAPI flavor text.

    Form feeds become spaces, the text is lowercased with its first character
    upper-cased, and the first letter after `.`, `?` or `!` plus whitespace is
    capitalized again.
    """
    if not raw:
        return ""
    text = raw.replace("\f", " ").lower()
    text = text[:1].upper() + text[1:]
    return _SENTENCE_START.sub(lambda m: m.group(1) + m.group(2).upper(), text)


def pick_flavor_text(species: Dict[str, Any], language: str = "en") -> Optional[str]:
    """First flavor text entry of `species` written in `language`, unnormalized."""
    for entry in species.get("flavor_text_entries") or []:
        lang = entry.get("language") or {}
        if lang.get("name") == language and entry.get("flavor_text"):
            return entry["flavor_text"]
    return None
