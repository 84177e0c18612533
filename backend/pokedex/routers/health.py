from fastapi import APIRouter, Depends

from ..schemas.pokemon import CatalogStatus
from ..services.engine import PokedexEngine, get_engine

router = APIRouter()


@router.get("/")
def root():
    return {"status": "ok"}


@router.get("/catalog", response_model=CatalogStatus)
def catalog_health(engine: PokedexEngine = Depends(get_engine)):
    # Never triggers a load; reports where the cache is in its lifecycle
    return engine.status()
