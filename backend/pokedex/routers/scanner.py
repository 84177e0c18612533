from fastapi import APIRouter, Depends, HTTPException
import logging

from ..schemas.pokemon import IdentifyRequest, IdentifyResponse
from ..services.engine import PokedexEngine, get_engine
from ..services.errors import PokedexError
from .pokemon import http_error

router = APIRouter()
log = logging.getLogger("uvicorn.error")


@router.post("/identify", response_model=IdentifyResponse)
async def identify_pokemon(payload: IdentifyRequest, engine: PokedexEngine = Depends(get_engine)):
    """Identify the Pokémon in a captured frame.

    Accepts a data URL (data:image/png;base64,...) or raw base64. `pokemon` is
    null when the model answered "Unknown" or named something outside the
    loaded catalog.
    """
    try:
        label, found = await engine.identify(payload.image_base64)
    except ValueError as e:
        raise HTTPException(status_code=400, detail=str(e)) from e
    except PokedexError as e:
        log.warning("identify failed: %s", e)
        raise http_error(e) from e
    return IdentifyResponse(label=label, pokemon=found)
