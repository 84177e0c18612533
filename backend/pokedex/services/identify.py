from typing import Any, Dict, Iterable, Optional, Tuple
import base64
import binascii
import logging
import re

import httpx

from .. import config
from ..schemas.pokemon import Pokemon
from .errors import ClassificationFailed

log = logging.getLogger("uvicorn.error")

PROMPT = (
    "What Pokémon is in this image? Provide only the Pokémon's name, or 'Unknown' "
    "if you cannot identify it. Do not include any other text or punctuation."
)
UNKNOWN_LABEL = "Unknown"
MAX_IMAGE_BYTES = 10 * 1024 * 1024

_DATA_URL = re.compile(r"^data:([\w\-/+.]+);base64,(.*)$", re.DOTALL)


def decode_image(image_base64: str) -> Tuple[str, bytes]:
    """Accept a data URL (data:image/png;base64,XXXX) or raw base64; return (mime_type, bytes).

    Raises ValueError for empty, oversized or undecodable payloads.
    """
    s = (image_base64 or "").strip()
    if not s:
        raise ValueError("empty image payload")
    mime_type = "image/png"
    m = _DATA_URL.match(s)
    if m:
        mime_type = m.group(1)
        s = m.group(2)
    # lightweight size guard (~3/4 base64 -> bytes)
    if int(len(s) * 0.75) > MAX_IMAGE_BYTES:
        raise ValueError("image too large (max 10MB)")
    try:
        raw = base64.b64decode(s, validate=True)
    except (binascii.Error, ValueError) as e:
        raise ValueError("invalid base64 image") from e
    if not raw:
        raise ValueError("empty image payload")
    return mime_type, raw


def reconcile(raw_label: Optional[str], catalog: Iterable[Pokemon]) -> Optional[Pokemon]:
    """Resolve a classifier label to a catalog entry by exact, case-insensitive name."""
    label = (raw_label or "").strip().lower()
    if not label or label == UNKNOWN_LABEL.lower():
        return None
    for p in catalog:
        if p.name == label:
            return p
    return None


class GeminiClassifier:
    """Asks Gemini's generateContent endpoint to name the Pokémon in one image."""

    def __init__(
        self,
        api_key: Optional[str] = None,
        model: Optional[str] = None,
        base_url: Optional[str] = None,
        timeout: float = 30.0,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        self.api_key = api_key if api_key is not None else config.get_server_secret("GEMINI_API_KEY")
        self.model = model or config.GEMINI_MODEL
        self.base_url = (base_url or config.GEMINI_API_BASE).rstrip("/")
        self.timeout = timeout
        self._transport = transport

    @property
    def configured(self) -> bool:
        return bool(self.api_key)

    def _payload(self, image: bytes, mime_type: str) -> Dict[str, Any]:
        return {
            "contents": [
                {
                    "role": "user",
                    "parts": [
                        {"text": PROMPT},
                        {"inlineData": {"mimeType": mime_type, "data": base64.b64encode(image).decode("ascii")}},
                    ],
                }
            ]
        }

    async def classify(self, image: bytes, mime_type: str = "image/png") -> str:
        """Return the model's free-text label, or "Unknown" when it gave an empty answer."""
        if not self.configured:
            raise ClassificationFailed("GEMINI_API_KEY is not configured", configured=False)

        url = f"{self.base_url}/models/{self.model}:generateContent"
        try:
            async with httpx.AsyncClient(timeout=httpx.Timeout(self.timeout), transport=self._transport) as client:
                r = await client.post(
                    url,
                    params={"key": self.api_key},
                    json=self._payload(image, mime_type),
                    headers={"Content-Type": "application/json"},
                )
        except httpx.TimeoutException as e:
            raise ClassificationFailed(f"timeout: {e!s}") from e
        except httpx.RequestError as e:
            raise ClassificationFailed(f"{e.__class__.__name__}: {e!s}") from e

        if r.status_code != 200:
            raise ClassificationFailed(f"Gemini API failed: {r.status_code} - {_error_message(r)}")

        try:
            body = r.json()
            text = body["candidates"][0]["content"]["parts"][0].get("text") or ""
        except (ValueError, KeyError, IndexError, TypeError, AttributeError) as e:
            raise ClassificationFailed(f"malformed response: {e.__class__.__name__}: {e!s}") from e
        if not isinstance(text, str):
            raise ClassificationFailed("malformed response: candidate text is not a string")

        label = text.strip() or UNKNOWN_LABEL
        log.debug("gemini label: %s", label)
        return label


def _error_message(r: httpx.Response) -> str:
    try:
        return r.json()["error"]["message"]
    except (ValueError, KeyError, TypeError):
        return r.text or "Unknown error"
