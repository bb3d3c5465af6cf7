"""Catalogue query engine.

Provides:
- query: filter → sort over an in-memory product list
- derive_facets / default_filter_spec: seed the filter UI from the full product set
- toggle_* / set_*: FilterSpec transitions, one per user interaction
- CatalogueService: caches products from a content source and serves queries"""

import logging
import time
from dataclasses import replace
from typing import Dict, Iterable, List, Optional, Sequence

from .config import CATALOGUE_TTL, PRICE_CEILING
from .content import AbstractContentSource, ContentFetchError
from .models import Color, Facets, FilterSpec, Product, Review, SortOrder

logger = logging.getLogger(__name__)


def query(products: Optional[Sequence[Product]], spec: FilterSpec) -> List[Product]:
    """Return the visible products for a spec.

    All predicates are AND-combined. An inverted price range (min > max)
    simply matches nothing. Sorting is stable, so ties keep their catalogue
    order. Price sort takes precedence if both sorts are set.
    """
    if not products:
        return []

    filtered = [p for p in products if _matches(p, spec)]

    if spec.price_sort != SortOrder.NONE:
        return sorted(filtered, key=lambda p: p.price, reverse=spec.price_sort == SortOrder.DESCENDING)
    if spec.popularity_sort != SortOrder.NONE:
        return sorted(filtered, key=lambda p: p.sold_count, reverse=spec.popularity_sort == SortOrder.DESCENDING)
    return filtered


def _matches(p: Product, spec: FilterSpec) -> bool:
    # Name search
    if spec.search_text and spec.search_text.lower() not in (p.name or "").lower():
        return False
    # Color filter, only when colors are selected
    if spec.selected_colors and not any(c.name in spec.selected_colors for c in (p.colors or ())):
        return False
    # Size filter, only when sizes are selected
    if spec.selected_sizes and p.size not in spec.selected_sizes:
        return False
    return spec.price_min <= p.price <= spec.price_max


def derive_facets(products: Optional[Iterable[Product]]) -> Facets:
    """Collect distinct colors, sizes and the price range, in first-seen order."""
    colors: Dict[str, str] = {}
    sizes: Dict[str, None] = {}
    prices: List[int] = []
    for p in products or ():
        for c in p.colors or ():
            # First hex seen for a name wins
            colors.setdefault(c.name, c.hex)
        if p.size:
            sizes.setdefault(p.size, None)
        prices.append(p.price)

    return Facets(
        colors=tuple(Color(name=name, hex=hex_) for name, hex_ in colors.items()),
        sizes=tuple(sizes),
        min_price=min(prices) if prices else None,
        max_price=max(prices) if prices else None,
    )


def default_filter_spec(facets: Optional[Facets] = None) -> FilterSpec:
    """Spec with nothing selected, bounded by the observed price range."""
    if facets is None or facets.min_price is None or facets.max_price is None:
        return FilterSpec()
    return FilterSpec(price_min=facets.min_price, price_max=facets.max_price)


# FilterSpec transitions. Each returns a new spec; sorts stay mutually exclusive.

def toggle_price_sort(spec: FilterSpec, order: SortOrder) -> FilterSpec:
    """Select a price order, or clear it if already selected. Clears popularity sort."""
    new_order = SortOrder.NONE if spec.price_sort == order else SortOrder(order)
    return replace(spec, price_sort=new_order, popularity_sort=SortOrder.NONE)


def toggle_popularity_sort(spec: FilterSpec, order: SortOrder) -> FilterSpec:
    """Select a popularity order, or clear it if already selected. Clears price sort."""
    new_order = SortOrder.NONE if spec.popularity_sort == order else SortOrder(order)
    return replace(spec, popularity_sort=new_order, price_sort=SortOrder.NONE)


def toggle_color(spec: FilterSpec, name: str) -> FilterSpec:
    return replace(spec, selected_colors=spec.selected_colors ^ {name})


def toggle_size(spec: FilterSpec, size: str) -> FilterSpec:
    return replace(spec, selected_sizes=spec.selected_sizes ^ {size})


def set_search_text(spec: FilterSpec, text: Optional[str]) -> FilterSpec:
    return replace(spec, search_text=text or "")


def set_min_price(spec: FilterSpec, value: Optional[float]) -> FilterSpec:
    # Any non-negative value, not clamped to the catalogue range
    return replace(spec, price_min=max(0, value or 0))


def set_max_price(spec: FilterSpec, value: Optional[float]) -> FilterSpec:
    # Empty input means "no upper limit"
    return replace(spec, price_max=max(0, value or PRICE_CEILING))


class CatalogueService:
    """Holds the last good product set from a content source and answers queries over it.

    The set is fetched again once it is older than `ttl` seconds. A failed
    fetch keeps whatever was loaded before and is retried on the next call.
    """

    def __init__(self, source: AbstractContentSource, ttl: float = CATALOGUE_TTL) -> None:
        self.source = source
        self.ttl = ttl
        self.products: List[Product] = []
        self.facets: Facets = Facets()
        self.loaded_at: Optional[float] = None

    @property
    def loaded(self) -> bool:
        return self.loaded_at is not None

    @property
    def stale(self) -> bool:
        return self.loaded_at is None or time.monotonic() - self.loaded_at >= self.ttl

    async def load(self) -> List[Product]:
        """Fetch a fresh product set and recompute facets. Never raises on fetch failure."""
        try:
            products = await self.source.fetch_products()
        except ContentFetchError as e:
            logger.error("Error fetching products: %s", e)
            return self.products

        self.products = list(products or [])
        self.facets = derive_facets(self.products)
        self.loaded_at = time.monotonic()
        return self.products

    async def ensure_loaded(self) -> None:
        if self.stale:
            await self.load()

    def default_spec(self) -> FilterSpec:
        return default_filter_spec(self.facets)

    def browse(self, spec: Optional[FilterSpec] = None) -> List[Product]:
        """Query the loaded product set; the default spec shows everything."""
        return query(self.products, spec or FilterSpec())

    async def product(self, slug: str) -> Optional[Product]:
        """Look up one product, preferring the loaded set over a round trip."""
        for p in self.products:
            if p.slug == slug:
                return p
        try:
            return await self.source.fetch_product(slug)
        except ContentFetchError as e:
            logger.error("Error fetching product %s: %s", slug, e)
            return None

    async def reviews(self) -> List[Review]:
        """Customer reviews, empty when the content source is unavailable."""
        try:
            return await self.source.fetch_reviews()
        except ContentFetchError as e:
            logger.error("Error fetching reviews: %s", e)
            return []
