from typing import List, Optional, Tuple
import asyncio
import logging

from ..schemas.pokemon import CatalogStatus, Generation, Pokemon, ResolveResult
from .catalog_cache import CatalogCache
from .description import normalize, pick_flavor_text
from .errors import CatalogLoadFailed, CatalogNotReady
from .identify import GeminiClassifier, decode_image, reconcile
from .indexes import RegionLookup
from .pokeapi import PokeAPIClient
from .query import resolve

log = logging.getLogger("uvicorn.error")


class PokedexEngine:
    """Public surface of the catalog engine used by the routers.

    Owns the catalog cache; callers only receive read-only results.
    """

    def __init__(self, client: Optional[PokeAPIClient] = None, classifier: Optional[GeminiClassifier] = None):
        self.client = client or PokeAPIClient()
        self.cache = CatalogCache(self.client)
        self.classifier = classifier or GeminiClassifier()
        self._background: Optional["asyncio.Future[None]"] = None

    async def ensure_loaded(self) -> None:
        await self.cache.ensure_loaded()

    async def resolve(
        self,
        name_query: Optional[str] = "",
        type_filter: Optional[str] = None,
        generation_filter: Optional[int] = None,
    ) -> ResolveResult:
        species = None
        if generation_filter is not None:
            # Generation filtering intersects against the whole catalog; it never triggers the load itself
            if not self.cache.is_loaded:
                raise CatalogNotReady()
            species = await self.cache.get_generation_species(generation_filter)
        else:
            await self.cache.ensure_loaded()
        return resolve(self.cache.entries, name_query, type_filter, species)

    async def get_region_map(self) -> RegionLookup:
        return await self.cache.ensure_regions()

    async def regions_for(self, name: str) -> List[str]:
        return (await self.get_region_map()).regions_for(name)

    def reconcile(self, raw_label: Optional[str]) -> Optional[Pokemon]:
        # An unloaded cache has no entries, so this yields None without loading anything
        return reconcile(raw_label, self.cache.entries)

    @staticmethod
    def normalize(raw: Optional[str]) -> str:
        return normalize(raw)

    async def identify(self, image_base64: str) -> Tuple[str, Optional[Pokemon]]:
        """Classify an uploaded image and reconcile the label against the loaded catalog.

        Raises ValueError for an undecodable image and ClassificationFailed when
        the classifier call fails.
        """
        mime_type, raw = decode_image(image_base64)
        label = await self.classifier.classify(raw, mime_type)
        found = self.reconcile(label)
        log.info("identify: label=%r matched=%s", label, found.name if found else None)
        return label, found

    async def describe(self, name: str, language: str = "en") -> str:
        species = await self.client.fetch_species(name)
        return normalize(pick_flavor_text(species, language))

    async def get_entry(self, name: str) -> Optional[Pokemon]:
        await self.cache.ensure_loaded()
        return self.cache.get(name)

    async def get_type_names(self) -> List[str]:
        return await self.cache.get_type_names()

    async def list_generations(self) -> List[Generation]:
        return await self.cache.list_generations()

    def status(self) -> CatalogStatus:
        return CatalogStatus(
            state=self.cache.state,
            entries=len(self.cache.entries),
            regions_loaded=self.cache.regions_loaded,
            generations=self.cache.memoized_generations,
        )

    def start_background_load(self) -> None:
        """Kick off the bulk catalog load without waiting for it."""
        if self._background is None or self._background.done():
            self._background = asyncio.ensure_future(self._background_load())

    async def _background_load(self) -> None:
        try:
            await self.cache.ensure_loaded()
        except CatalogLoadFailed as e:
            # State is back to EMPTY; the next query retries
            log.warning("Background catalog load failed: %s", e)


_ENGINE: Optional[PokedexEngine] = None


def get_engine() -> PokedexEngine:
    global _ENGINE
    if _ENGINE is None:
        _ENGINE = PokedexEngine()
    return _ENGINE
