"""Utility functions for the Muse storefront."""
from dataclasses import asdict
from typing import Any, Dict

from .config import ALL_SIZE, PLACEHOLDER_IMAGE
from .models import Facets, Product, SizeModel


def format_price(price: int) -> str:
    """Indonesian-style price label, e.g. 150000 -> 'IDR 150.000.00'."""
    return f"IDR {price:,}.00".replace(",", ".")


def format_size(size: str) -> str:
    return "All Size" if size == ALL_SIZE else size


def thumbnail_url(p: Product) -> str:
    """First product image, or the placeholder when there is none."""
    return p.images[0] if p.images else PLACEHOLDER_IMAGE


def serialize_product(p: Product) -> Dict[str, Any]:
    """Convert Product to a JSON-serializable dict with display fields added."""
    data = asdict(p)
    data["colors"] = list(data["colors"])
    data["images"] = list(data["images"]) or [PLACEHOLDER_IMAGE]
    data["thumbnail"] = thumbnail_url(p)
    data["price_label"] = format_price(p.price)
    data["size_label"] = format_size(p.size)
    data["fit_models"] = [serialize_size_model(m) for m in p.fit_models]
    return data


def serialize_facets(facets: Facets) -> Dict[str, Any]:
    return {
        "colors": [{"name": c.name, "hex": c.hex} for c in facets.colors],
        "sizes": [{"value": s, "label": format_size(s)} for s in facets.sizes],
        "min_price": facets.min_price,
        "max_price": facets.max_price,
    }


def serialize_size_model(m: SizeModel) -> Dict[str, Any]:
    return {
        "height": f"{m.measurement.height}cm",
        "weight": f"{m.measurement.weight}kg",
        "image": m.image,
        "desc": m.desc,
    }
