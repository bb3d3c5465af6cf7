"""
Shared fixtures for the storefront tests.
"""
from typing import List, Optional

import pytest

from muse_storefront.content import AbstractContentSource
from muse_storefront.models import CheckFitPage, Color, ContactTemplate, Product, Review

RED = Color("Red", "#FF0000")
BLACK = Color("Black", "#000000")
CREAM = Color("Cream", "#FFFDD0")


def make_product(
    id: str,
    name: Optional[str] = None,
    price: int = 100000,
    sold_count: int = 0,
    colors=(),
    size: str = "all_size",
    images=("https://example.com/img.jpg",),
) -> Product:
    return Product(
        id=id,
        name=name or f"Item {id}",
        price=price,
        rating=4.5,
        colors=tuple(colors),
        size=size,
        sold_count=sold_count,
        images=tuple(images),
        slug=f"item-{id}",
    )


class FakeContentSource(AbstractContentSource):
    """In-memory content source; counts fetches."""

    def __init__(
        self,
        products=None,
        page: Optional[CheckFitPage] = None,
        error: Optional[Exception] = None,
        reviews=None,
    ):
        self.products = list(products or [])
        self.reviews = list(reviews or [])
        self.page = page or CheckFitPage()
        self.error = error
        self.fetch_count = 0

    async def fetch_products(self) -> List[Product]:
        self.fetch_count += 1
        if self.error:
            raise self.error
        return list(self.products)

    async def fetch_product(self, slug: str) -> Optional[Product]:
        if self.error:
            raise self.error
        return next((p for p in self.products if p.slug == slug), None)

    async def fetch_check_fit_page(self) -> CheckFitPage:
        if self.error:
            raise self.error
        return self.page

    async def fetch_reviews(self) -> List[Review]:
        if self.error:
            raise self.error
        return list(self.reviews)


@pytest.fixture
def catalogue_products() -> List[Product]:
    return [
        make_product("1", "Linen Kaftan Dress", price=350000, sold_count=12, colors=[RED, CREAM], size="all_size"),
        make_product("2", "Basic Tee", price=120000, sold_count=40, colors=[BLACK], size="M"),
        make_product("3", "Pleated Skirt", price=220000, sold_count=7, colors=[CREAM], size="S"),
        make_product("4", "Silk Scarf", price=90000, sold_count=40, colors=[], size="all_size"),
        make_product("5", "Kaftan Top", price=180000, sold_count=3, colors=[BLACK, RED], size="L"),
    ]


@pytest.fixture
def fit_template() -> ContactTemplate:
    return ContactTemplate(top="Halo Muse, saya ingin cek ukuran.", bottom="Terima kasih!")
