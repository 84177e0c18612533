from pydantic import BaseModel, ConfigDict, computed_field, field_validator
from typing import Any, Dict, List, Literal, Optional, Tuple

LoadState = Literal["EMPTY", "LOADING", "LOADED"]


def _name_of(obj: Any) -> Optional[str]:
    # PokeAPI nests references as {"name": ..., "url": ...}
    if isinstance(obj, dict):
        return obj.get("name")
    return None


def id_from_url(url: str) -> int:
    """Trailing numeric id of a PokeAPI resource URL, e.g. .../generation/3/ -> 3."""
    return int(url.rstrip("/").rsplit("/", 1)[-1])


class NamedResource(BaseModel):
    name: str
    url: str


class Ability(BaseModel):
    model_config = ConfigDict(frozen=True)

    name: str
    is_hidden: bool = False


class Stat(BaseModel):
    model_config = ConfigDict(frozen=True)

    name: str
    base_stat: int


class Sprites(BaseModel):
    model_config = ConfigDict(frozen=True)

    front_default: Optional[str] = None
    front_shiny: Optional[str] = None
    home_default: Optional[str] = None
    home_shiny: Optional[str] = None
    official_artwork: Optional[str] = None

    @classmethod
    def from_api(cls, raw: Optional[Dict[str, Any]]) -> "Sprites":
        raw = raw or {}
        other = raw.get("other") or {}
        home = other.get("home") or {}
        artwork = other.get("official-artwork") or {}
        return cls(
            front_default=raw.get("front_default"),
            front_shiny=raw.get("front_shiny"),
            home_default=home.get("front_default"),
            home_shiny=home.get("front_shiny"),
            official_artwork=artwork.get("front_default"),
        )


class Pokemon(BaseModel):
    """One catalog entry, immutable once fetched."""

    model_config = ConfigDict(frozen=True)

    id: int
    name: str
    types: Tuple[str, ...] = ()
    abilities: Tuple[Ability, ...] = ()
    stats: Tuple[Stat, ...] = ()
    sprites: Sprites = Sprites()
    height: int = 0  # decimetres
    weight: int = 0  # hectograms

    @field_validator("name")
    @classmethod
    def _lowercase_name(cls, v: str) -> str:
        return v.lower()

    @classmethod
    def from_api(cls, raw: Dict[str, Any]) -> "Pokemon":
        types = sorted(raw.get("types") or [], key=lambda t: t.get("slot", 0))
        return cls(
            id=raw["id"],
            name=raw["name"],
            types=tuple(n for n in (_name_of(t.get("type")) for t in types) if n),
            abilities=tuple(
                Ability(name=_name_of(a.get("ability")), is_hidden=bool(a.get("is_hidden")))
                for a in raw.get("abilities") or []
                if _name_of(a.get("ability"))
            ),
            stats=tuple(
                Stat(name=_name_of(s.get("stat")), base_stat=int(s.get("base_stat") or 0))
                for s in raw.get("stats") or []
                if _name_of(s.get("stat"))
            ),
            sprites=Sprites.from_api(raw.get("sprites")),
            height=int(raw.get("height") or 0),
            weight=int(raw.get("weight") or 0),
        )

    @computed_field  # type: ignore[misc]
    @property
    def main_image(self) -> Optional[str]:
        return self.sprites.home_default or self.sprites.official_artwork or self.sprites.front_default

    @computed_field  # type: ignore[misc]
    @property
    def shiny_image(self) -> Optional[str]:
        return self.sprites.home_shiny

    @computed_field  # type: ignore[misc]
    @property
    def total_base_stat(self) -> int:
        return sum(s.base_stat for s in self.stats)

    @computed_field  # type: ignore[misc]
    @property
    def height_m(self) -> float:
        return round(self.height / 10, 1)

    @computed_field  # type: ignore[misc]
    @property
    def weight_kg(self) -> float:
        return round(self.weight / 10, 1)


class RegionDirectory(BaseModel):
    """A regional pokedex: the region it belongs to (if any) and its species."""

    name: str
    region: Optional[str] = None
    species: List[str] = []

    @classmethod
    def from_api(cls, raw: Dict[str, Any]) -> "RegionDirectory":
        return cls(
            name=raw["name"],
            region=_name_of(raw.get("region")),
            species=[
                n for n in (_name_of(e.get("pokemon_species")) for e in raw.get("pokemon_entries") or []) if n
            ],
        )


class GenerationDirectory(BaseModel):
    id: int
    name: str
    species: List[str] = []

    @classmethod
    def from_api(cls, raw: Dict[str, Any]) -> "GenerationDirectory":
        return cls(
            id=raw["id"],
            name=raw["name"],
            species=[n for n in (_name_of(s) for s in raw.get("pokemon_species") or []) if n],
        )


class Generation(BaseModel):
    id: int
    name: str


class ResolveResult(BaseModel):
    matches: List[Pokemon] = []
    promoted: Optional[Pokemon] = None
    no_results: bool = False


class PokemonDetail(BaseModel):
    pokemon: Pokemon
    regions: List[str] = []


class IdentifyRequest(BaseModel):
    image_base64: str


class IdentifyResponse(BaseModel):
    label: str
    pokemon: Optional[Pokemon] = None


class CatalogStatus(BaseModel):
    state: LoadState
    entries: int = 0
    regions_loaded: bool = False
    generations: List[int] = []
