"""Content source for the storefront.

Provides:
- AbstractContentSource: interface the catalogue and fit check depend on
- DatoCMSContentSource: async GraphQL client for the DatoCMS delivery API
- parse_product / parse_review: map raw CMS records to models, skipping unusable ones"""

import logging
from typing import Any, Dict, List, Optional, Tuple

import httpx

from .config import (
    DATOCMS_API_TOKEN,
    DATOCMS_ENDPOINT,
    DATOCMS_ENVIRONMENT,
    DEFAULT_PHONE_NUMBER,
    HTTP_TIMEOUT,
)
from .fit import FIT_MODEL_MEASUREMENTS
from .models import CheckFitPage, Color, ContactTemplate, Product, Review, SizeModel

logger = logging.getLogger(__name__)


PRODUCT_FIELDS = """
    id
    productName
    price
    rating
    size
    description {
      value
    }
    color {
      colorName
      color {
        hex
      }
    }
    slug
    productImage {
      image {
        url
      }
    }
    productFit {
      image {
        url
      }
      desc
    }
    soldNumber
"""

PRODUCTS_QUERY = f"""
  query Products {{
    allProducts {{{PRODUCT_FIELDS}}}
  }}
"""

PRODUCT_QUERY = f"""
  query Product($slug: String!) {{
    product(filter: {{ slug: {{ eq: $slug }} }}) {{{PRODUCT_FIELDS}}}
  }}
"""

DEFAULT_FIT_FIELDS = "\n".join(
    f"      image{i} {{ url }}\n      text{i}" for i in range(1, len(FIT_MODEL_MEASUREMENTS) + 1)
)

CHECK_FIT_PAGE_QUERY = f"""
  query CheckFitPage {{
    checkFitPage {{
      title
      button
      whatsappTop
      whatsappBottom
      phoneNumber
    }}
    defaultfit {{
      defaultProduct
{DEFAULT_FIT_FIELDS}
    }}
  }}
"""

REVIEWS_QUERY = """
  query Reviews {
    allReviews {
      id
      title
      stars
      review
      author
    }
  }
"""


class ContentFetchError(Exception):
    """The content source could not deliver a usable response."""


class AbstractContentSource:
    """Interface for content sources."""

    async def fetch_products(self) -> List[Product]:
        # Return every catalogue product
        raise NotImplementedError

    async def fetch_product(self, slug: str) -> Optional[Product]:
        # Return one product by slug, None when it does not exist
        raise NotImplementedError

    async def fetch_check_fit_page(self) -> CheckFitPage:
        # Return the editable content of the check-your-fit page
        raise NotImplementedError

    async def fetch_reviews(self) -> List[Review]:
        # Return every published customer review
        raise NotImplementedError


class DatoCMSContentSource(AbstractContentSource):
    """Async adapter for the DatoCMS content delivery API."""

    def __init__(
        self,
        api_token: Optional[str] = DATOCMS_API_TOKEN,
        environment: str = DATOCMS_ENVIRONMENT,
        endpoint: str = DATOCMS_ENDPOINT,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ) -> None:
        self.api_token = api_token
        self.environment = environment
        self.endpoint = endpoint
        self._transport = transport

    async def execute(self, query: str, variables: Optional[Dict[str, Any]] = None) -> Dict[str, Any]:
        """Run a GraphQL query and return its `data` object."""
        if not self.api_token:
            logger.error("DatoCMS API token is not defined")
            raise ContentFetchError("DatoCMS API token is missing")

        headers = {
            "Authorization": f"Bearer {self.api_token}",
            "X-Environment": self.environment,
            "Accept": "application/json",
        }
        payload: Dict[str, Any] = {"query": query}
        if variables:
            payload["variables"] = variables

        try:
            async with httpx.AsyncClient(transport=self._transport, timeout=HTTP_TIMEOUT) as client:
                response = await client.post(self.endpoint, json=payload, headers=headers)
            response.raise_for_status()
            body = response.json()
        except httpx.HTTPStatusError as e:
            raise ContentFetchError(f"DatoCMS returned HTTP {e.response.status_code}") from e
        except httpx.HTTPError as e:
            raise ContentFetchError(f"DatoCMS request failed: {e}") from e
        except ValueError as e:
            raise ContentFetchError("DatoCMS returned a non-JSON body") from e

        if not isinstance(body, dict):
            raise ContentFetchError("DatoCMS returned an unexpected payload")
        if body.get("errors"):
            messages = "; ".join(
                str(err.get("message", err)) if isinstance(err, dict) else str(err) for err in body["errors"]
            )
            raise ContentFetchError(f"DatoCMS query failed: {messages}")
        return body.get("data") or {}

    async def fetch_products(self) -> List[Product]:
        data = await self.execute(PRODUCTS_QUERY)
        records = data.get("allProducts") or []
        products: List[Product] = []
        for record in records:
            product = parse_product(record)
            if product is not None:
                products.append(product)
        logger.info("Fetched %d products (%d records)", len(products), len(records))
        return products

    async def fetch_product(self, slug: str) -> Optional[Product]:
        data = await self.execute(PRODUCT_QUERY, {"slug": slug})
        record = data.get("product")
        if not record:
            return None
        return parse_product(record)

    async def fetch_check_fit_page(self) -> CheckFitPage:
        data = await self.execute(CHECK_FIT_PAGE_QUERY)
        page = data.get("checkFitPage") or {}
        default_fit = data.get("defaultfit") or {}
        # phoneNumber is an integer field in the CMS
        phone = page.get("phoneNumber")
        return CheckFitPage(
            title=page.get("title") or "",
            button=page.get("button") or "",
            template=ContactTemplate(
                top=page.get("whatsappTop") or "",
                bottom=page.get("whatsappBottom") or "",
            ),
            phone_number=str(phone) if phone else DEFAULT_PHONE_NUMBER,
            default_product=default_fit.get("defaultProduct"),
            size_models=parse_default_fit(default_fit),
        )

    async def fetch_reviews(self) -> List[Review]:
        data = await self.execute(REVIEWS_QUERY)
        records = data.get("allReviews") or []
        reviews = [r for r in (parse_review(record) for record in records) if r is not None]
        logger.info("Fetched %d reviews", len(reviews))
        return reviews


def _url(value: Any) -> str:
    # {"url": ...} asset reference
    if not isinstance(value, dict):
        return ""
    return value.get("url") or ""


def structured_text(value: Any) -> str:
    """Flatten a DatoCMS structured-text document to plain text, one block per line."""
    if value is None:
        return ""
    if isinstance(value, str):
        return value
    if isinstance(value, list):
        return "\n".join(t for t in (structured_text(v) for v in value) if t)
    if not isinstance(value, dict):
        return ""
    if "document" in value:
        return structured_text(value["document"])
    if value.get("type") == "span":
        return value.get("value") or ""
    children = value.get("children") or []
    if value.get("type") in ("paragraph", "heading", "listItem", "blockquote", "link"):
        # Spans inside one block run together
        return "".join(structured_text(c) for c in children)
    return structured_text(children)


def parse_size_models(entries: Any) -> Tuple[SizeModel, ...]:
    """Pair fit photos with the gallery measurements; extra photos are dropped."""
    models = []
    for measurement, entry in zip(FIT_MODEL_MEASUREMENTS, entries or []):
        if not isinstance(entry, dict):
            continue
        image, desc = _url(entry.get("image")), entry.get("desc") or ""
        if image or desc:
            models.append(SizeModel(measurement=measurement, image=image, desc=desc))
    return tuple(models)


def parse_default_fit(default_fit: Dict[str, Any]) -> Tuple[SizeModel, ...]:
    """The default gallery is stored as numbered image/text fields."""
    entries = [
        {"image": default_fit.get(f"image{i}"), "desc": default_fit.get(f"text{i}")}
        for i in range(1, len(FIT_MODEL_MEASUREMENTS) + 1)
    ]
    return parse_size_models(entries)


def parse_product(record: Dict[str, Any]) -> Optional[Product]:
    """Convert a raw CMS product record to a Product, None if it is unusable."""
    if not isinstance(record, dict):
        return None
    try:
        colors = tuple(
            Color(name=c["colorName"], hex=(c.get("color") or {}).get("hex", ""))
            for c in (record.get("color") or [])
            if c and c.get("colorName")
        )
        images = tuple(
            img["image"]["url"]
            for img in (record.get("productImage") or [])
            if img and img.get("image") and img["image"].get("url")
        )
        description = record.get("description")
        if isinstance(description, dict):
            description = description.get("value")
        return Product(
            id=str(record["id"]),
            name=record.get("productName") or "",
            price=max(0, int(record.get("price") or 0)),
            rating=float(record.get("rating") or 0.0),
            colors=colors,
            size=record.get("size") or "",
            sold_count=max(0, int(record.get("soldNumber") or 0)),
            images=images,
            slug=record.get("slug"),
            description=structured_text(description) or None,
            fit_models=parse_size_models(record.get("productFit")),
        )
    except (AttributeError, KeyError, TypeError, ValueError) as e:
        # Nested entries of the wrong shape (e.g. a bare string in `color`) land here too
        logger.warning("Skipping malformed product record %r: %s", record.get("id"), e)
        return None


def parse_review(record: Dict[str, Any]) -> Optional[Review]:
    if not isinstance(record, dict) or record.get("id") is None:
        return None
    try:
        stars = min(5, max(0, int(record.get("stars") or 0)))
    except (TypeError, ValueError):
        stars = 0
    return Review(
        id=str(record["id"]),
        title=record.get("title") or "",
        stars=stars,
        review=record.get("review") or "",
        author=record.get("author") or "",
    )
