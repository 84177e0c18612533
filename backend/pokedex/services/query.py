from typing import AbstractSet, Iterable, List, Optional

from ..schemas.pokemon import Pokemon, ResolveResult


def _clean(value: Optional[str]) -> str:
    return (value or "").strip().lower()


def is_noop_query(name_query: Optional[str], type_filter: Optional[str], generation_filter: Optional[int]) -> bool:
    """True when no filter is set; such a query would match the whole catalog."""
    return not _clean(name_query) and not (type_filter or "").strip() and generation_filter is None


def resolve(
    entries: Iterable[Pokemon],
    name_query: Optional[str] = "",
    type_filter: Optional[str] = None,
    generation_species: Optional[AbstractSet[str]] = None,
) -> ResolveResult:
    """Filter entries by name substring, exact type tag and generation membership.

    `generation_species` is the resolved species set of the requested
    generation, or None when no generation filter applies. Name matching uses
    the trimmed query, but a single match is promoted only when its name equals
    the lowercased query as given. The type tag is compared exactly.
    """
    query = _clean(name_query)
    type_name = type_filter if (type_filter or "").strip() else None

    matches: List[Pokemon] = []
    for p in entries:
        if query and query not in p.name:
            continue
        if type_name and type_name not in p.types:
            continue
        if generation_species is not None and p.name not in generation_species:
            continue
        matches.append(p)

    if len(matches) == 1 and matches[0].name == (name_query or "").lower():
        return ResolveResult(matches=[], promoted=matches[0])

    any_filter = bool(query or type_name or generation_species is not None)
    return ResolveResult(matches=matches, promoted=None, no_results=not matches and any_filter)
