from typing import Any, Awaitable, Callable, Dict, List, Optional, Sequence, Tuple, TypeVar
import asyncio
import logging

import httpx

from .. import config
from ..schemas.pokemon import (
    Generation,
    GenerationDirectory,
    NamedResource,
    Pokemon,
    RegionDirectory,
    id_from_url,
)
from .errors import RemoteFetchFailed

log = logging.getLogger("uvicorn.error")

T = TypeVar("T")


def _headers() -> Dict[str, str]:
    return {
        "Accept": "application/json",
        "User-Agent": "Pokedex/1.0",
    }


async def gather_fail_fast(coros: Sequence[Awaitable[T]]) -> List[T]:
    """Run coros concurrently and return results in input order.

    The first failure cancels every member still in flight and is re-raised,
    so a batch either yields all of its results or none.
    """
    tasks = [asyncio.ensure_future(c) for c in coros]
    try:
        return list(await asyncio.gather(*tasks))
    except BaseException:
        for t in tasks:
            if not t.done():
                t.cancel()
        await asyncio.gather(*tasks, return_exceptions=True)
        raise


def _named_page(page: Dict[str, Any]) -> Tuple[List[NamedResource], Optional[str]]:
    return [NamedResource(**item) for item in page["results"]], page.get("next")


class PokeAPIClient:
    """Read-only client for the PokeAPI v2 REST service.

    Every failure (transport, timeout, non-2xx, undecodable or unexpected body)
    surfaces as RemoteFetchFailed. Nothing is retried here.
    """

    def __init__(
        self,
        base_url: Optional[str] = None,
        timeout: Optional[float] = None,
        concurrency: Optional[int] = None,
        page_size: Optional[int] = None,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        self.base_url = (base_url or config.POKEAPI_BASE).rstrip("/")
        self.timeout = timeout if timeout is not None else config.POKEAPI_TIMEOUT
        self.concurrency = concurrency or config.POKEAPI_CONCURRENCY
        self.page_size = page_size or config.POKEAPI_PAGE_SIZE
        self._transport = transport

    def _client(self) -> httpx.AsyncClient:
        return httpx.AsyncClient(
            timeout=httpx.Timeout(self.timeout),
            headers=_headers(),
            transport=self._transport,
        )

    def url_for(self, *parts: Any) -> str:
        return "/".join([self.base_url, *(str(p).strip("/") for p in parts)])

    async def _get_json(
        self, client: httpx.AsyncClient, url: str, kind: str, params: Optional[Dict[str, Any]] = None
    ) -> Any:
        try:
            r = await client.get(url, params=params)
        except httpx.TimeoutException as e:
            raise RemoteFetchFailed(kind, f"timeout: {e!s}") from e
        except httpx.RequestError as e:
            raise RemoteFetchFailed(kind, f"{e.__class__.__name__}: {e!s}") from e

        if not 200 <= r.status_code < 300:
            raise RemoteFetchFailed(kind, f"HTTP {r.status_code} for {url}", status_code=r.status_code)
        try:
            return r.json()
        except ValueError as e:
            raise RemoteFetchFailed(kind, f"invalid JSON from {url}: {e!s}") from e

    @staticmethod
    def _parse(kind: str, parse: Callable[[Any], T], data: Any) -> T:
        try:
            return parse(data)
        except (KeyError, TypeError, ValueError, AttributeError) as e:
            # pydantic's ValidationError is a ValueError
            raise RemoteFetchFailed(kind, f"unexpected payload: {e.__class__.__name__}: {e!s}") from e

    async def list_all(self, kind: str) -> List[NamedResource]:
        """List every {name, url} of a collection, following `next` page links."""
        url: Optional[str] = self.url_for(kind)
        params: Optional[Dict[str, Any]] = {"limit": self.page_size, "offset": 0}
        out: List[NamedResource] = []
        async with self._client() as client:
            while url:
                page = await self._get_json(client, url, kind, params=params)
                results, url = self._parse(kind, _named_page, page)
                out.extend(results)
                # `next` already carries the paging parameters
                params = None
        log.debug("pokeapi list_all: kind=%s count=%s", kind, len(out))
        return out

    async def fetch_detail(self, url: str, kind: str = "detail") -> Any:
        async with self._client() as client:
            return await self._get_json(client, url, kind)

    async def fetch_many(self, urls: Sequence[str], kind: str, parse: Callable[[Any], T]) -> List[T]:
        """Fetch and parse every url as one fail-fast batch; output order follows `urls`."""
        sem = asyncio.Semaphore(self.concurrency)
        async with self._client() as client:

            async def fetch_one(url: str) -> T:
                async with sem:
                    data = await self._get_json(client, url, kind)
                return self._parse(kind, parse, data)

            return await gather_fail_fast([fetch_one(u) for u in urls])

    async def fetch_pokemon(self, name_or_url: str) -> Pokemon:
        url = name_or_url if "://" in name_or_url else self.url_for("pokemon", name_or_url.lower())
        data = await self.fetch_detail(url, kind="pokemon")
        return self._parse("pokemon", Pokemon.from_api, data)

    async def fetch_pokemon_batch(self, urls: Sequence[str]) -> List[Pokemon]:
        return await self.fetch_many(urls, "pokemon", Pokemon.from_api)

    async def fetch_region_directories(self, urls: Sequence[str]) -> List[RegionDirectory]:
        return await self.fetch_many(urls, "pokedex", RegionDirectory.from_api)

    async def fetch_generation(self, gen_id: int) -> GenerationDirectory:
        data = await self.fetch_detail(self.url_for("generation", gen_id), kind="generation")
        return self._parse("generation", GenerationDirectory.from_api, data)

    async def list_generations(self) -> List[Generation]:
        listing = await self.list_all("generation")
        return [
            self._parse("generation", lambda r: Generation(id=id_from_url(r.url), name=r.name), r)
            for r in listing
        ]

    async def fetch_type_names(self) -> List[str]:
        return [r.name for r in await self.list_all("type")]

    async def fetch_species(self, name: str) -> Dict[str, Any]:
        data = await self.fetch_detail(self.url_for("pokemon-species", name.lower()), kind="pokemon-species")
        if not isinstance(data, dict):
            raise RemoteFetchFailed("pokemon-species", "unexpected payload: not an object")
        return data
