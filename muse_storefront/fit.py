"""Check-your-fit evaluator.

A height/weight pair fits the one-size range when it falls inside at least
one of FIT_BANDS. Otherwise the shopper is offered a pre-filled WhatsApp
enquiry built by build_contact_message / build_contact_link."""

import math
import re
from numbers import Real
from typing import Any, Optional, Sequence, Union
from urllib.parse import quote

from .config import DEFAULT_PHONE_NUMBER, NOT_PROVIDED, WHATSAPP_HOST
from .models import ContactTemplate, FitBand, Measurement, Product

# Measurements of the models in the fit photos, in gallery order.
FIT_MODEL_MEASUREMENTS: Sequence[Measurement] = (
    Measurement(height=160, weight=40),
    Measurement(height=165, weight=50),
    Measurement(height=170, weight=55),
    Measurement(height=170, weight=60),
    Measurement(height=175, weight=65),
)

# Height in cm, weight in kg, both ends inclusive.
FIT_BANDS: Sequence[FitBand] = (
    FitBand(height_min=150, height_max=155, weight_min=40, weight_max=50),
    FitBand(height_min=156, height_max=165, weight_min=45, weight_max=60),
    FitBand(height_min=166, height_max=175, weight_min=48, weight_max=63),
    FitBand(height_min=176, height_max=180, weight_min=50, weight_max=65),
)

_LEADING_INT = re.compile(r"^\s*([+-]?\d+)")

# Unreserved marks left unescaped in the text parameter
_URI_SAFE = "-_.!~*'()"


def _is_number(value: Any) -> bool:
    return isinstance(value, Real) and not isinstance(value, bool) and math.isfinite(value)


def parse_measurement(value: Any) -> Optional[int]:
    """Read the leading integer of a form value ("170cm" -> 170), None if there is none."""
    if value is None:
        return None
    if _is_number(value):
        return int(value)
    match = _LEADING_INT.match(str(value))
    return int(match.group(1)) if match else None


def is_valid_measurement(height: Any, weight: Any) -> bool:
    """Both values present, numeric, finite and strictly positive."""
    for value in (height, weight):
        if value is None or (isinstance(value, str) and not value.strip()):
            return False
        try:
            number = float(value)
        except (TypeError, ValueError):
            return False
        if not math.isfinite(number) or number <= 0:
            return False
    return True


def evaluate(height: Any, weight: Any, bands: Sequence[FitBand] = FIT_BANDS) -> bool:
    """True iff some band contains the point. Invalid input never matches."""
    if not (_is_number(height) and _is_number(weight)):
        return False
    return any(band.contains(height, weight) for band in bands)


def evaluate_measurement(measurement: Measurement) -> bool:
    return evaluate(measurement.height, measurement.weight)


def _measurement_text(value: Any) -> str:
    if value is None:
        return NOT_PROVIDED
    text = str(value).strip()
    return text or NOT_PROVIDED


def build_contact_message(
    product: Union[Product, str, None],
    height: Any,
    weight: Any,
    template: Optional[ContactTemplate] = None,
) -> str:
    """Compose the fit enquiry. Missing measurements get the NOT_PROVIDED placeholder."""
    template = template or ContactTemplate()
    if isinstance(product, Product):
        product_name = product.name
    else:
        product_name = product or NOT_PROVIDED

    lines = [
        template.top,
        "",
        f"- Nama Produk: {product_name}",
        f"- Tinggi badan: {_measurement_text(height)} cm",
        f"- Berat badan: {_measurement_text(weight)} kg",
        "",
        template.bottom,
    ]
    return "\n".join(lines).strip("\n")


def build_contact_link(message: str, phone_number: Optional[str] = None) -> str:
    """WhatsApp deep link carrying the percent-encoded message."""
    phone = phone_number or DEFAULT_PHONE_NUMBER
    return f"https://{WHATSAPP_HOST}/{phone}?text={quote(message, safe=_URI_SAFE)}"
