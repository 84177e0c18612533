from typing import Awaitable, Callable, Dict, FrozenSet, Generic, List, Optional, Tuple, TypeVar
import asyncio
import logging
import time

from ..schemas.pokemon import Generation, LoadState, Pokemon
from .errors import (
    CatalogLoadFailed,
    GenerationLoadFailed,
    PokedexError,
    RegionMapLoadFailed,
    RemoteFetchFailed,
)
from .indexes import (
    RegionLookup,
    build_generation_species_set,
    build_region_map,
    filter_type_names,
)
from .pokeapi import PokeAPIClient

log = logging.getLogger("uvicorn.error")

T = TypeVar("T")


class _OnceLoader(Generic[T]):
    """Single-flight, load-once holder: EMPTY -> LOADING -> LOADED, or back to EMPTY on failure.

    Concurrent callers share one asyncio task. Each caller awaits it through
    asyncio.shield so a cancelled caller does not cancel the shared load.
    """

    def __init__(
        self,
        label: str,
        load: Callable[[], Awaitable[T]],
        wrap_error: Callable[[BaseException], PokedexError],
    ):
        self.label = label
        self._load = load
        self._wrap_error = wrap_error
        self.state: LoadState = "EMPTY"
        self.value: Optional[T] = None
        self.attempts = 0
        self._task: Optional["asyncio.Future[T]"] = None

    async def get(self) -> T:
        if self.state == "LOADED":
            return self.value  # type: ignore[return-value]
        if self._task is None:
            self.state = "LOADING"
            self.attempts += 1
            self._task = asyncio.ensure_future(self._run())
        return await asyncio.shield(self._task)

    async def _run(self) -> T:
        started = time.monotonic()
        log.info("%s load started (attempt %s)", self.label, self.attempts)
        try:
            value = await self._load()
        except BaseException as e:
            self.state = "EMPTY"
            self._task = None
            if isinstance(e, RemoteFetchFailed):
                log.warning("%s load failed, state reset to EMPTY: %s", self.label, e)
                raise self._wrap_error(e) from e
            raise
        self.value = value
        self.state = "LOADED"
        self._task = None
        log.info("%s loaded in %.2fs", self.label, time.monotonic() - started)
        return value


class CatalogCache:
    """Process-lifetime cache of the full catalog and its derived indices.

    Only the methods of this class mutate the stored entries, the region map
    and the generation memo; readers get tuples, frozensets and RegionLookup.
    """

    def __init__(self, client: PokeAPIClient):
        self._client = client
        self._catalog: _OnceLoader[Tuple[Pokemon, ...]] = _OnceLoader(
            "catalog", self._fetch_catalog, CatalogLoadFailed
        )
        self._regions: _OnceLoader[RegionLookup] = _OnceLoader(
            "region map", self._fetch_region_map, RegionMapLoadFailed
        )
        self._generation_species: Dict[int, FrozenSet[str]] = {}
        self._generations: Optional[List[Generation]] = None
        self._type_names: Optional[List[str]] = None

    # --- catalog ---

    @property
    def state(self) -> LoadState:
        return self._catalog.state

    @property
    def is_loaded(self) -> bool:
        return self._catalog.state == "LOADED"

    @property
    def entries(self) -> Tuple[Pokemon, ...]:
        """Loaded entries in listing order, or an empty tuple before the first successful load."""
        return self._catalog.value or ()

    async def ensure_loaded(self) -> Tuple[Pokemon, ...]:
        return await self._catalog.get()

    async def _fetch_catalog(self) -> Tuple[Pokemon, ...]:
        listing = await self._client.list_all("pokemon")
        entries = await self._client.fetch_pokemon_batch([r.url for r in listing])
        log.info("catalog: fetched %s entries", len(entries))
        return tuple(entries)

    def get(self, name: str) -> Optional[Pokemon]:
        key = name.strip().lower()
        for p in self.entries:
            if p.name == key:
                return p
        return None

    # --- region map ---

    @property
    def regions_loaded(self) -> bool:
        return self._regions.state == "LOADED"

    async def ensure_regions(self) -> RegionLookup:
        return await self._regions.get()

    async def _fetch_region_map(self) -> RegionLookup:
        listing = await self._client.list_all("pokedex")
        directories = await self._client.fetch_region_directories([r.url for r in listing])
        lookup = RegionLookup(build_region_map(directories))
        log.info("region map: %s directories, %s entries", len(directories), len(lookup))
        return lookup

    # --- generations ---

    @property
    def memoized_generations(self) -> List[int]:
        return sorted(self._generation_species)

    async def get_generation_species(self, gen_id: int) -> FrozenSet[str]:
        cached = self._generation_species.get(gen_id)
        if cached is not None:
            log.debug("generation %s species: memo hit", gen_id)
            return cached
        try:
            directory = await self._client.fetch_generation(gen_id)
        except RemoteFetchFailed as e:
            log.warning("generation %s species fetch failed: %s", gen_id, e)
            raise GenerationLoadFailed(gen_id, e) from e
        species = build_generation_species_set(directory)
        self._generation_species[gen_id] = species
        return species

    async def list_generations(self) -> List[Generation]:
        if self._generations is None:
            self._generations = sorted(await self._client.list_generations(), key=lambda g: g.id)
        return list(self._generations)

    # --- types ---

    async def get_type_names(self) -> List[str]:
        if self._type_names is None:
            self._type_names = filter_type_names(await self._client.fetch_type_names())
        return list(self._type_names)
