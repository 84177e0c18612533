from typing import Any, Dict, List, Optional

import httpx
import pytest

from pokedex.schemas.pokemon import Pokemon
from pokedex.services.engine import PokedexEngine
from pokedex.services.identify import GeminiClassifier
from pokedex.services.pokeapi import PokeAPIClient

BASE = "https://pokeapi.test/api/v2"


def pokemon_json(pid: int, name: str, types: List[str], height: int = 4, weight: int = 60) -> Dict[str, Any]:
    return {
        "id": pid,
        "name": name,
        "height": height,
        "weight": weight,
        "types": [{"slot": i + 1, "type": {"name": t, "url": f"{BASE}/type/{t}/"}} for i, t in enumerate(types)],
        "abilities": [
            {"ability": {"name": "static", "url": f"{BASE}/ability/9/"}, "is_hidden": False, "slot": 1},
            {"ability": {"name": "lightning-rod", "url": f"{BASE}/ability/31/"}, "is_hidden": True, "slot": 3},
        ],
        "stats": [
            {"base_stat": 35, "effort": 0, "stat": {"name": "hp", "url": f"{BASE}/stat/1/"}},
            {"base_stat": 55, "effort": 0, "stat": {"name": "attack", "url": f"{BASE}/stat/2/"}},
        ],
        "sprites": {
            "front_default": f"https://img.test/{pid}.png",
            "front_shiny": f"https://img.test/shiny/{pid}.png",
            "other": {
                "home": {
                    "front_default": f"https://img.test/home/{pid}.png",
                    "front_shiny": f"https://img.test/home/shiny/{pid}.png",
                },
                "official-artwork": {"front_default": f"https://img.test/art/{pid}.png"},
            },
        },
    }


POKEMON = [
    pokemon_json(1, "bulbasaur", ["grass", "poison"], height=7, weight=69),
    pokemon_json(25, "pikachu", ["electric"]),
    pokemon_json(26, "raichu", ["electric"], height=8, weight=300),
    pokemon_json(151, "mew", ["psychic"]),
    pokemon_json(172, "pichu", ["electric"], height=3, weight=20),
]

POKEDEXES = [
    # national dex belongs to no region
    {"id": 1, "name": "national", "region": None, "species": ["bulbasaur", "pikachu", "raichu", "mew", "pichu"]},
    {"id": 2, "name": "kanto", "region": "kanto", "species": ["bulbasaur", "pikachu", "raichu"]},
    {"id": 3, "name": "original-johto", "region": "johto", "species": ["pichu", "pikachu", "raichu"]},
]

GENERATIONS = {
    1: {"id": 1, "name": "generation-i", "species": ["bulbasaur", "pikachu", "raichu", "mew"]},
    2: {"id": 2, "name": "generation-ii", "species": ["pichu"]},
}

TYPES = ["normal", "grass", "poison", "electric", "psychic", "unknown", "shadow", "stellar"]

SPECIES = {
    "pikachu": {
        "name": "pikachu",
        "flavor_text_entries": [
            {"flavor_text": "ほっぺたの 両側に", "language": {"name": "ja"}},
            {
                "flavor_text": "When several of\nthese POKéMON gather, their\felectricity could build and cause lightning storms.",
                "language": {"name": "en"},
            },
        ],
    },
}


class FakePokeAPI:
    """In-memory PokeAPI served through httpx.MockTransport; records every request path."""

    def __init__(self):
        self.calls: List[str] = []
        self.fail: Dict[str, int] = {}

    def count(self, path: str) -> int:
        return self.calls.count(path)

    def transport(self) -> httpx.MockTransport:
        return httpx.MockTransport(self.handler)

    def _listing(self, kind: str) -> Optional[Dict[str, Any]]:
        if kind == "pokemon":
            results = [{"name": p["name"], "url": f"{BASE}/pokemon/{p['id']}/"} for p in POKEMON]
        elif kind == "pokedex":
            results = [{"name": d["name"], "url": f"{BASE}/pokedex/{d['id']}/"} for d in POKEDEXES]
        elif kind == "generation":
            results = [{"name": g["name"], "url": f"{BASE}/generation/{g['id']}/"} for g in GENERATIONS.values()]
        elif kind == "type":
            results = [{"name": t, "url": f"{BASE}/type/{i + 1}/"} for i, t in enumerate(TYPES)]
        else:
            return None
        return {"count": len(results), "next": None, "previous": None, "results": results}

    def _detail(self, kind: str, key: str) -> Optional[Dict[str, Any]]:
        if kind == "pokemon":
            return next((p for p in POKEMON if str(p["id"]) == key or p["name"] == key), None)
        if kind == "pokedex":
            d = next((d for d in POKEDEXES if str(d["id"]) == key), None)
            if d is None:
                return None
            return {
                "id": d["id"],
                "name": d["name"],
                "region": {"name": d["region"], "url": f"{BASE}/region/{d['region']}/"} if d["region"] else None,
                "pokemon_entries": [
                    {"entry_number": i + 1, "pokemon_species": {"name": s, "url": f"{BASE}/pokemon-species/{s}/"}}
                    for i, s in enumerate(d["species"])
                ],
            }
        if kind == "generation":
            g = GENERATIONS.get(int(key)) if key.isdigit() else None
            if g is None:
                return None
            return {
                "id": g["id"],
                "name": g["name"],
                "pokemon_species": [{"name": s, "url": f"{BASE}/pokemon-species/{s}/"} for s in g["species"]],
            }
        if kind == "pokemon-species":
            return SPECIES.get(key)
        return None

    def handler(self, request: httpx.Request) -> httpx.Response:
        path = request.url.path.rstrip("/")
        self.calls.append(path)
        if path in self.fail:
            return httpx.Response(self.fail[path], json={"detail": "upstream failure"})

        parts = path[len("/api/v2/"):].split("/")
        if len(parts) == 1:
            body = self._listing(parts[0])
        else:
            body = self._detail(parts[0], parts[1])
        if body is None:
            return httpx.Response(404, text="Not Found")
        return httpx.Response(200, json=body)


@pytest.fixture
def fake_api() -> FakePokeAPI:
    return FakePokeAPI()


@pytest.fixture
def pokeapi(fake_api) -> PokeAPIClient:
    return PokeAPIClient(base_url=BASE, transport=fake_api.transport(), concurrency=4, page_size=100)


@pytest.fixture
def engine(pokeapi) -> PokedexEngine:
    # empty key: scanner disabled unless a test supplies its own classifier
    return PokedexEngine(client=pokeapi, classifier=GeminiClassifier(api_key=""))


@pytest.fixture
def catalog() -> List[Pokemon]:
    return [Pokemon.from_api(p) for p in POKEMON]
