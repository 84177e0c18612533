from pokedex.schemas.pokemon import Pokemon
from pokedex.services.query import is_noop_query, resolve


def _names(result):
    return [p.name for p in result.matches]


def test_exact_single_match_is_promoted():
    catalog = [Pokemon(id=25, name="pikachu", types=("electric",)), Pokemon(id=172, name="pichu", types=("electric",))]

    result = resolve(catalog, "pikachu", None, None)
    assert result.promoted is not None
    assert result.promoted.name == "pikachu"
    assert result.matches == []
    assert result.no_results is False


def test_substring_returns_all_matches_in_catalog_order():
    catalog = [Pokemon(id=25, name="pikachu"), Pokemon(id=172, name="pichu")]

    result = resolve(catalog, "pi", None, None)
    assert result.promoted is None
    assert _names(result) == ["pikachu", "pichu"]


def test_name_query_is_case_insensitive(catalog):
    result = resolve(catalog, "PIKACHU", None, None)
    assert result.promoted is not None and result.promoted.id == 25


def test_padded_query_matches_but_is_not_promoted(catalog):
    result = resolve(catalog, "  Pikachu ", None, None)
    assert result.promoted is None
    assert _names(result) == ["pikachu"]


def test_single_partial_match_is_not_promoted(catalog):
    result = resolve(catalog, "bulba", None, None)
    assert result.promoted is None
    assert _names(result) == ["bulbasaur"]


def test_promotion_needs_exactly_one_match(catalog):
    assert resolve(catalog, "mew", None, None).promoted.name == "mew"
    result = resolve(catalog, "chu", None, None)
    assert result.promoted is None
    assert _names(result) == ["pikachu", "raichu", "pichu"]


def test_type_filter_is_exact(catalog):
    assert resolve(catalog, "", "elect", None).matches == []
    assert _names(resolve(catalog, "", "electric", None)) == ["pikachu", "raichu", "pichu"]


def test_type_filter_is_not_trimmed(catalog):
    result = resolve(catalog, "", " electric", None)
    assert result.matches == []
    assert result.no_results is True

    # whitespace only counts as no filter
    assert len(resolve(catalog, "", "  ", None).matches) == len(catalog)


def test_type_filter_matches_any_slot(catalog):
    assert _names(resolve(catalog, "", "poison", None)) == ["bulbasaur"]


def test_generation_species_set_is_intersected(catalog):
    gen1 = frozenset({"bulbasaur", "pikachu", "raichu", "mew"})
    result = resolve(catalog, "", "electric", gen1)
    assert _names(result) == ["pikachu", "raichu"]


def test_all_predicates_combined(catalog):
    gen2 = frozenset({"pichu"})
    result = resolve(catalog, "pichu", "electric", gen2)
    assert result.promoted is not None and result.promoted.name == "pichu"

    result = resolve(catalog, "pika", "electric", gen2)
    assert result.matches == []
    assert result.promoted is None
    assert result.no_results is True


def test_no_results_only_flagged_when_a_filter_was_given():
    assert resolve([], "", None, None).no_results is False
    assert resolve([], "zzz", None, None).no_results is True


def test_empty_filters_match_everything(catalog):
    # The HTTP layer never calls resolve in this state; the resolver itself does not special-case it
    assert len(resolve(catalog, "", None, None).matches) == len(catalog)


def test_is_noop_query():
    assert is_noop_query("", None, None)
    assert is_noop_query("   ", "", None)
    assert not is_noop_query("pi", None, None)
    assert not is_noop_query("", "fire", None)
    assert not is_noop_query("", None, 1)
