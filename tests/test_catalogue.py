"""
Tests for the catalogue query engine, facets, FilterSpec transitions and CatalogueService.
"""
import pytest

from conftest import FakeContentSource, make_product
from muse_storefront.catalogue import (
    CatalogueService,
    default_filter_spec,
    derive_facets,
    query,
    set_max_price,
    set_min_price,
    set_search_text,
    toggle_color,
    toggle_popularity_sort,
    toggle_price_sort,
    toggle_size,
)
from muse_storefront.config import PRICE_CEILING
from muse_storefront.content import ContentFetchError
from muse_storefront.models import Color, Facets, FilterSpec, Review, SortOrder


def ids(products):
    return [p.id for p in products]


# =============================================================================
# query: filter stage
# =============================================================================

class TestQueryFilters:

    def test_empty_spec_returns_everything_in_order(self, catalogue_products):
        spec = FilterSpec(price_min=float("-inf"), price_max=float("inf"))
        assert query(catalogue_products, spec) == catalogue_products

    def test_default_spec_is_identity(self, catalogue_products):
        assert ids(query(catalogue_products, FilterSpec())) == ["1", "2", "3", "4", "5"]

    def test_empty_and_missing_product_lists(self):
        assert query([], FilterSpec()) == []
        assert query(None, FilterSpec(search_text="tee")) == []

    def test_search_is_case_insensitive_substring(self, catalogue_products):
        spec = FilterSpec(search_text="KAFTAN")
        assert ids(query(catalogue_products, spec)) == ["1", "5"]

    def test_search_without_match(self, catalogue_products):
        assert query(catalogue_products, FilterSpec(search_text="denim")) == []

    def test_color_filter_matches_any_selected_color(self, catalogue_products):
        spec = FilterSpec(selected_colors=frozenset({"Red"}))
        assert ids(query(catalogue_products, spec)) == ["1", "5"]

        spec = FilterSpec(selected_colors=frozenset({"Cream", "Black"}))
        assert ids(query(catalogue_products, spec)) == ["1", "2", "3", "5"]

    def test_product_without_colors_only_visible_without_color_filter(self, catalogue_products):
        assert "4" in ids(query(catalogue_products, FilterSpec()))
        spec = FilterSpec(selected_colors=frozenset({"Red", "Black", "Cream"}))
        assert "4" not in ids(query(catalogue_products, spec))

    def test_size_filter(self, catalogue_products):
        spec = FilterSpec(selected_sizes=frozenset({"all_size", "S"}))
        assert ids(query(catalogue_products, spec)) == ["1", "3", "4"]

    def test_price_bounds_are_inclusive(self, catalogue_products):
        spec = FilterSpec(price_min=120000, price_max=220000)
        assert ids(query(catalogue_products, spec)) == ["2", "3", "5"]

    def test_inverted_price_range_matches_nothing(self, catalogue_products):
        spec = FilterSpec(price_min=300000, price_max=100000)
        assert query(catalogue_products, spec) == []

    def test_predicates_are_and_combined(self, catalogue_products):
        spec = FilterSpec(
            search_text="kaftan",
            selected_colors=frozenset({"Black"}),
            selected_sizes=frozenset({"L", "all_size"}),
            price_max=200000,
        )
        assert ids(query(catalogue_products, spec)) == ["5"]

    def test_input_list_is_not_mutated(self, catalogue_products):
        before = list(catalogue_products)
        query(catalogue_products, FilterSpec(price_sort=SortOrder.DESCENDING))
        assert catalogue_products == before


# =============================================================================
# query: sort stage
# =============================================================================

class TestQuerySorting:

    @pytest.fixture
    def three(self):
        return [
            make_product("a", price=100, sold_count=5),
            make_product("b", price=50, sold_count=20),
            make_product("c", price=200, sold_count=1),
        ]

    def test_price_ascending(self, three):
        result = query(three, FilterSpec(price_sort=SortOrder.ASCENDING))
        assert [p.price for p in result] == [50, 100, 200]

    def test_price_descending(self, three):
        result = query(three, FilterSpec(price_sort=SortOrder.DESCENDING))
        assert [p.price for p in result] == [200, 100, 50]

    def test_switching_to_popularity_descending(self, three):
        spec = toggle_price_sort(FilterSpec(), SortOrder.ASCENDING)
        spec = toggle_popularity_sort(spec, SortOrder.DESCENDING)
        result = query(three, spec)
        assert [(p.price, p.sold_count) for p in result] == [(50, 20), (100, 5), (200, 1)]

    def test_popularity_ascending(self, three):
        result = query(three, FilterSpec(popularity_sort=SortOrder.ASCENDING))
        assert [p.sold_count for p in result] == [1, 5, 20]

    def test_price_sort_wins_when_both_set(self, three):
        spec = FilterSpec(price_sort=SortOrder.ASCENDING, popularity_sort=SortOrder.DESCENDING)
        assert [p.price for p in query(three, spec)] == [50, 100, 200]

    def test_ties_keep_catalogue_order(self, catalogue_products):
        # Products 2 and 4 both sold 40
        asc = query(catalogue_products, FilterSpec(popularity_sort=SortOrder.ASCENDING))
        desc = query(catalogue_products, FilterSpec(popularity_sort=SortOrder.DESCENDING))
        assert ids(asc)[-2:] == ["2", "4"]
        assert ids(desc)[:2] == ["2", "4"]

    def test_repeated_queries_are_equal(self, catalogue_products):
        spec = FilterSpec(search_text="a", price_sort=SortOrder.DESCENDING)
        assert query(catalogue_products, spec) == query(catalogue_products, spec)


# =============================================================================
# Facets and defaults
# =============================================================================

class TestFacets:

    def test_facets_collect_distinct_values(self, catalogue_products):
        facets = derive_facets(catalogue_products)
        assert [c.name for c in facets.colors] == ["Red", "Cream", "Black"]
        assert facets.sizes == ("all_size", "M", "S", "L")
        assert (facets.min_price, facets.max_price) == (90000, 350000)

    def test_first_seen_hex_wins(self):
        products = [
            make_product("1", colors=[Color("Red", "#FF0000")]),
            make_product("2", colors=[Color("Red", "#FF0001")]),
        ]
        facets = derive_facets(products)
        assert facets.colors == (Color("Red", "#FF0000"),)

    def test_empty_catalogue(self):
        assert derive_facets([]) == Facets()
        assert derive_facets(None) == Facets()

    def test_default_spec_uses_observed_range(self, catalogue_products):
        spec = default_filter_spec(derive_facets(catalogue_products))
        assert (spec.price_min, spec.price_max) == (90000, 350000)
        assert query(catalogue_products, spec) == catalogue_products

    def test_default_spec_without_products(self):
        spec = default_filter_spec(Facets())
        assert (spec.price_min, spec.price_max) == (0, PRICE_CEILING)
        assert default_filter_spec() == FilterSpec()


# =============================================================================
# FilterSpec transitions
# =============================================================================

class TestTransitions:

    def test_sorts_are_mutually_exclusive(self):
        spec = toggle_price_sort(FilterSpec(), SortOrder.ASCENDING)
        assert spec.price_sort is SortOrder.ASCENDING

        spec = toggle_popularity_sort(spec, SortOrder.DESCENDING)
        assert spec.price_sort is SortOrder.NONE
        assert spec.popularity_sort is SortOrder.DESCENDING

        spec = toggle_price_sort(spec, SortOrder.DESCENDING)
        assert spec.popularity_sort is SortOrder.NONE
        assert spec.price_sort is SortOrder.DESCENDING

    def test_selecting_active_sort_clears_it(self):
        spec = toggle_price_sort(FilterSpec(), SortOrder.ASCENDING)
        spec = toggle_price_sort(spec, SortOrder.ASCENDING)
        assert spec.price_sort is SortOrder.NONE

    def test_transitions_do_not_mutate(self):
        original = FilterSpec()
        toggle_color(original, "Red")
        toggle_price_sort(original, SortOrder.ASCENDING)
        assert original == FilterSpec()

    def test_toggle_color_and_size(self):
        spec = toggle_color(FilterSpec(), "Red")
        spec = toggle_color(spec, "Black")
        assert spec.selected_colors == {"Red", "Black"}
        spec = toggle_color(spec, "Red")
        assert spec.selected_colors == {"Black"}

        spec = toggle_size(spec, "M")
        assert spec.selected_sizes == {"M"}
        assert toggle_size(spec, "M").selected_sizes == frozenset()

    def test_price_inputs_are_clamped(self):
        spec = set_min_price(FilterSpec(), -500)
        assert spec.price_min == 0
        assert set_min_price(spec, None).price_min == 0
        assert set_min_price(spec, 150000).price_min == 150000

        assert set_max_price(spec, None).price_max == PRICE_CEILING
        assert set_max_price(spec, 0).price_max == PRICE_CEILING
        assert set_max_price(spec, -1).price_max == 0
        assert set_max_price(spec, 200000).price_max == 200000

    def test_search_text(self):
        assert set_search_text(FilterSpec(), None).search_text == ""
        assert set_search_text(FilterSpec(), "tee").search_text == "tee"


# =============================================================================
# CatalogueService
# =============================================================================

class TestCatalogueService:

    @pytest.mark.asyncio
    async def test_load_computes_facets_once(self, catalogue_products):
        source = FakeContentSource(catalogue_products)
        service = CatalogueService(source)

        await service.ensure_loaded()
        await service.ensure_loaded()
        service.browse(FilterSpec(search_text="tee"))

        assert source.fetch_count == 1
        assert service.facets.max_price == 350000
        assert ids(service.browse()) == ["1", "2", "3", "4", "5"]

    @pytest.mark.asyncio
    async def test_fetch_error_degrades_to_empty_catalogue(self):
        service = CatalogueService(FakeContentSource(error=ContentFetchError("unreachable")))
        products = await service.load()

        assert products == []
        assert not service.loaded
        assert service.stale
        assert service.facets == Facets()
        assert service.browse(FilterSpec(search_text="tee")) == []
        assert service.default_spec() == FilterSpec()

    @pytest.mark.asyncio
    async def test_product_lookup(self, catalogue_products):
        service = CatalogueService(FakeContentSource(catalogue_products))
        assert (await service.product("item-3")).name == "Pleated Skirt"
        assert await service.product("missing") is None

    @pytest.mark.asyncio
    async def test_product_lookup_swallows_fetch_error(self):
        service = CatalogueService(FakeContentSource(error=ContentFetchError("boom")))
        assert await service.product("item-1") is None

    @pytest.mark.asyncio
    async def test_failed_first_fetch_is_retried(self, catalogue_products):
        source = FakeContentSource(catalogue_products, error=ContentFetchError("unreachable"))
        service = CatalogueService(source)

        await service.ensure_loaded()
        assert service.browse() == []

        source.error = None
        await service.ensure_loaded()

        assert source.fetch_count == 2
        assert service.loaded
        assert ids(service.browse()) == ["1", "2", "3", "4", "5"]
        assert service.facets.min_price == 90000

    @pytest.mark.asyncio
    async def test_expired_set_is_fetched_again(self, catalogue_products):
        source = FakeContentSource(catalogue_products[:2])
        service = CatalogueService(source, ttl=0)

        await service.ensure_loaded()
        source.products = catalogue_products
        await service.ensure_loaded()

        assert source.fetch_count == 2
        assert len(service.browse()) == 5

    @pytest.mark.asyncio
    async def test_failed_refresh_keeps_previous_set(self, catalogue_products):
        source = FakeContentSource(catalogue_products)
        service = CatalogueService(source, ttl=0)
        await service.load()
        loaded_at = service.loaded_at

        source.error = ContentFetchError("timeout")
        products = await service.load()

        assert ids(products) == ["1", "2", "3", "4", "5"]
        assert service.loaded_at == loaded_at
        assert service.facets.max_price == 350000

    @pytest.mark.asyncio
    async def test_reviews(self):
        review = Review(id="r1", title="Lovely", stars=5, review="Fits well", author="Sari")
        service = CatalogueService(FakeContentSource(reviews=[review]))
        assert await service.reviews() == [review]

    @pytest.mark.asyncio
    async def test_reviews_empty_on_fetch_error(self):
        service = CatalogueService(FakeContentSource(error=ContentFetchError("boom")))
        assert await service.reviews() == []
