# Data models for the catalogue and the fit check.
from dataclasses import dataclass, field
from enum import Enum
from typing import FrozenSet, Optional, Tuple

from .config import DEFAULT_PHONE_NUMBER, PRICE_CEILING


class SortOrder(str, Enum):
    """Direction of a catalogue sort. NONE leaves the order untouched."""

    NONE = ""
    ASCENDING = "low-to-high"
    DESCENDING = "high-to-low"


@dataclass(frozen=True)
class Color:
    name: str
    hex: str


@dataclass(frozen=True)
class Measurement:
    height: Optional[int] = None  # cm
    weight: Optional[int] = None  # kg


@dataclass(frozen=True)
class SizeModel:
    """A fit photo: a model of the given measurement wearing the piece."""

    measurement: Measurement
    image: str = ""
    desc: str = ""


@dataclass(frozen=True)
class Product:
    """Catalogue product as delivered by the content source."""

    id: str
    name: str
    price: int
    rating: float = 0.0
    colors: Tuple[Color, ...] = ()
    size: str = ""  # one of the size tags, "all_size" for one-size items
    sold_count: int = 0
    images: Tuple[str, ...] = ()  # first is the thumbnail
    slug: Optional[str] = None
    description: Optional[str] = None  # plain text
    fit_models: Tuple[SizeModel, ...] = ()


@dataclass(frozen=True)
class FilterSpec:
    """Active search, filter and sort parameters for the catalogue view.

    Immutable: every user interaction produces a new spec (see the
    transition helpers in catalogue.py). Empty color/size selections mean
    "no restriction".
    """

    search_text: str = ""
    selected_colors: FrozenSet[str] = frozenset()
    selected_sizes: FrozenSet[str] = frozenset()
    price_min: float = 0
    price_max: float = PRICE_CEILING
    price_sort: SortOrder = SortOrder.NONE
    popularity_sort: SortOrder = SortOrder.NONE


@dataclass(frozen=True)
class Facets:
    """Selectable filter values derived from the full product set."""

    colors: Tuple[Color, ...] = ()
    sizes: Tuple[str, ...] = ()
    min_price: Optional[int] = None  # None when there are no products
    max_price: Optional[int] = None


@dataclass(frozen=True)
class FitBand:
    """Height x weight rectangle, bounds inclusive on both ends."""

    height_min: float
    height_max: float
    weight_min: float
    weight_max: float

    def contains(self, height: float, weight: float) -> bool:
        return (
            self.height_min <= height <= self.height_max
            and self.weight_min <= weight <= self.weight_max
        )


@dataclass(frozen=True)
class ContactTemplate:
    """Editable text placed before and after the measurements in a fit enquiry."""

    top: str = ""
    bottom: str = ""


@dataclass(frozen=True)
class CheckFitPage:
    """Content of the check-your-fit page."""

    title: str = ""
    button: str = ""
    template: ContactTemplate = field(default_factory=ContactTemplate)
    phone_number: str = DEFAULT_PHONE_NUMBER
    default_product: Optional[str] = None
    size_models: Tuple[SizeModel, ...] = ()  # shown when the product has none of its own


@dataclass
class ContactMessage:
    """Contact form submission forwarded to the Muse inbox."""

    first_name: str
    last_name: str
    email: str
    message: str

    @property
    def full_name(self) -> str:
        return f"{self.first_name} {self.last_name}"


@dataclass(frozen=True)
class Review:
    """Customer review shown on the home and product pages."""

    id: str
    title: str = ""
    stars: int = 0  # 0-5
    review: str = ""
    author: str = ""
