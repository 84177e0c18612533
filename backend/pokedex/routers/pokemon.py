from typing import List, Optional

from fastapi import APIRouter, Depends, HTTPException, Query

from ..schemas.pokemon import CatalogStatus, Generation, PokemonDetail, ResolveResult
from ..services.engine import PokedexEngine, get_engine
from ..services.errors import (
    CatalogLoadFailed,
    CatalogNotReady,
    ClassificationFailed,
    GenerationLoadFailed,
    PokedexError,
    RegionMapLoadFailed,
    RemoteFetchFailed,
)
from ..services.query import is_noop_query

router = APIRouter()


def http_error(e: PokedexError) -> HTTPException:
    """Map an engine failure onto the HTTP status the client should see."""
    if isinstance(e, CatalogNotReady):
        return HTTPException(status_code=409, detail=str(e))
    if isinstance(e, ClassificationFailed) and not e.configured:
        return HTTPException(status_code=503, detail=str(e))
    if isinstance(e, RemoteFetchFailed) and e.status_code == 404:
        return HTTPException(status_code=404, detail=f"{e.kind} not found")
    if isinstance(e, (CatalogLoadFailed, RegionMapLoadFailed, GenerationLoadFailed, RemoteFetchFailed, ClassificationFailed)):
        return HTTPException(status_code=502, detail=str(e))
    return HTTPException(status_code=500, detail=str(e))


@router.post("/load", response_model=CatalogStatus)
async def load_catalog(engine: PokedexEngine = Depends(get_engine)):
    try:
        await engine.ensure_loaded()
    except PokedexError as e:
        raise http_error(e) from e
    return engine.status()


@router.get("/search", response_model=ResolveResult)
async def search_pokemon(
    q: str = Query("", description="Name substring, case-insensitive"),
    type: Optional[str] = Query(None, description="Exact type name, e.g. electric"),
    generation: Optional[int] = Query(None, ge=1, description="Generation id, e.g. 1"),
    engine: PokedexEngine = Depends(get_engine),
):
    if is_noop_query(q, type, generation):
        # Nothing to filter on: return nothing rather than the whole catalog
        return ResolveResult()
    try:
        return await engine.resolve(q, type, generation)
    except PokedexError as e:
        raise http_error(e) from e


@router.get("/types", response_model=List[str])
async def list_types(engine: PokedexEngine = Depends(get_engine)):
    try:
        return await engine.get_type_names()
    except PokedexError as e:
        raise http_error(e) from e


@router.get("/generations", response_model=List[Generation])
async def list_generations(engine: PokedexEngine = Depends(get_engine)):
    try:
        return await engine.list_generations()
    except PokedexError as e:
        raise http_error(e) from e


@router.get("/{name}", response_model=PokemonDetail)
async def get_pokemon(name: str, engine: PokedexEngine = Depends(get_engine)):
    try:
        entry = await engine.get_entry(name)
        if entry is None:
            raise HTTPException(status_code=404, detail=f"Pokémon not found: {name}")
        regions = await engine.regions_for(entry.name)
    except PokedexError as e:
        raise http_error(e) from e
    return PokemonDetail(pokemon=entry, regions=regions)


@router.get("/{name}/regions", response_model=List[str])
async def get_pokemon_regions(name: str, engine: PokedexEngine = Depends(get_engine)):
    try:
        return await engine.regions_for(name)
    except PokedexError as e:
        raise http_error(e) from e


@router.get("/{name}/description")
async def get_pokemon_description(
    name: str,
    lang: str = Query("en", description="Flavor text language code"),
    engine: PokedexEngine = Depends(get_engine),
):
    try:
        text = await engine.describe(name, lang)
    except PokedexError as e:
        raise http_error(e) from e
    return {"name": name.lower(), "description": text}
