"""Derived lookup indices built from PokeAPI collection resources.

Everything here is a pure function of its input; the catalog cache owns the
results.
"""
from typing import Dict, FrozenSet, Iterable, Iterator, List, Mapping, Set

from ..schemas.pokemon import GenerationDirectory, RegionDirectory

# Type resources that exist in PokeAPI but have no real member entries
SENTINEL_TYPES: FrozenSet[str] = frozenset({"unknown", "shadow", "stellar"})


def build_region_map(directories: Iterable[RegionDirectory]) -> Dict[str, Set[str]]:
    region_map: Dict[str, Set[str]] = {}
    for directory in directories:
        if not directory.region:
            # e.g. the national dex, which belongs to no region
            continue
        for species in directory.species:
            region_map.setdefault(species.lower(), set()).add(directory.region)
    return region_map


def build_generation_species_set(directory: GenerationDirectory) -> FrozenSet[str]:
    return frozenset(s.lower() for s in directory.species)


def filter_type_names(names: Iterable[str]) -> List[str]:
    return [n for n in names if n not in SENTINEL_TYPES]


class RegionLookup(Mapping[str, FrozenSet[str]]):
    """Read-only view over a region map.

    Every name resolves: entries absent from all regional directories map to
    an empty set rather than raising KeyError.
    """

    def __init__(self, region_map: Mapping[str, Iterable[str]]):
        self._data: Dict[str, FrozenSet[str]] = {k: frozenset(v) for k, v in region_map.items()}

    def __getitem__(self, name: str) -> FrozenSet[str]:
        return self._data.get(name.lower(), frozenset())

    def __contains__(self, name: object) -> bool:
        return isinstance(name, str) and name.lower() in self._data

    def __iter__(self) -> Iterator[str]:
        return iter(self._data)

    def __len__(self) -> int:
        return len(self._data)

    def regions_for(self, name: str) -> List[str]:
        return sorted(self[name])
