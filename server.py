import logging
from dataclasses import asdict
from typing import List, Optional

from fastapi import FastAPI, HTTPException, Query
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from pydantic import BaseModel

from muse_storefront import BrevoMailer, CatalogueService, DatoCMSContentSource
from muse_storefront.catalogue import (
    set_max_price,
    set_min_price,
    set_search_text,
)
from muse_storefront.config import CORS_ORIGINS
from muse_storefront.content import ContentFetchError
from muse_storefront.fit import (
    build_contact_link,
    build_contact_message,
    evaluate_measurement,
    is_valid_measurement,
    parse_measurement,
)
from muse_storefront.mailer import MailerError, ValidationError
from muse_storefront.models import CheckFitPage, ContactMessage, FilterSpec, Measurement, SortOrder
from muse_storefront.utils import serialize_facets, serialize_product, serialize_size_model

logging.basicConfig(level=logging.INFO, format="%(asctime)s %(levelname)s %(name)s: %(message)s")
logger = logging.getLogger(__name__)

app = FastAPI(title="Muse Storefront API")

app.add_middleware(
    CORSMiddleware,
    allow_origins=CORS_ORIGINS,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


class FitCheckRequest(BaseModel):
    height: Optional[str] = None
    weight: Optional[str] = None
    product: Optional[str] = None  # product slug


class ContactRequest(BaseModel):
    firstName: str = ""
    lastName: str = ""
    email: str = ""
    message: str = ""


class NewsletterRequest(BaseModel):
    email: str = ""


# Shared services, one content source and one mailer per process.
content_source = DatoCMSContentSource()
catalogue = CatalogueService(content_source)
mailer = BrevoMailer()


def _error(status_code: int, message: str) -> JSONResponse:
    return JSONResponse(status_code=status_code, content={"error": message})


@app.get("/catalogue")
async def catalogue_endpoint(
    search: str = "",
    colors: List[str] = Query(default=[]),
    sizes: List[str] = Query(default=[]),
    min_price: Optional[float] = None,
    max_price: Optional[float] = None,
    price_sort: SortOrder = SortOrder.NONE,
    popularity_sort: SortOrder = SortOrder.NONE,
):
    await catalogue.ensure_loaded()
    spec = FilterSpec(
        selected_colors=frozenset(colors),
        selected_sizes=frozenset(sizes),
        price_sort=price_sort,
        popularity_sort=popularity_sort,
    )
    spec = set_search_text(spec, search)
    spec = set_min_price(spec, min_price)
    spec = set_max_price(spec, max_price)

    products = catalogue.browse(spec)
    return {"count": len(products), "products": [serialize_product(p) for p in products]}


@app.get("/catalogue/facets")
async def facets_endpoint():
    await catalogue.ensure_loaded()
    return serialize_facets(catalogue.facets)


@app.get("/catalogue/{slug}")
async def product_endpoint(slug: str):
    product = await catalogue.product(slug)
    if product is None:
        raise HTTPException(status_code=404, detail="Product not found")
    return serialize_product(product)


@app.post("/checkyourfit")
async def check_fit_endpoint(request: FitCheckRequest):
    try:
        page = await content_source.fetch_check_fit_page()
    except ContentFetchError as e:
        logger.warning("Check fit page content unavailable, using defaults: %s", e)
        page = CheckFitPage()

    product_name = page.default_product
    size_models = page.size_models
    if request.product:
        product = await catalogue.product(request.product)
        if product is not None:
            product_name = product.name
            size_models = product.fit_models or size_models

    # Validity accepts any positive number ("1e3", "170.5") but the bands see
    # only the leading integer, so "1e3" is evaluated as 1 and does not fit.
    valid = is_valid_measurement(request.height, request.weight)
    measurement = Measurement(height=parse_measurement(request.height), weight=parse_measurement(request.weight))
    fits = valid and evaluate_measurement(measurement)
    message = build_contact_message(product_name, request.height, request.weight, page.template)
    return {
        "valid": valid,
        "fits": fits,
        "message": message,
        "contact_link": build_contact_link(message, page.phone_number),
        "size_models": [serialize_size_model(m) for m in size_models],
    }


@app.get("/reviews")
async def reviews_endpoint():
    reviews = await catalogue.reviews()
    return {"count": len(reviews), "reviews": [asdict(r) for r in reviews]}


@app.post("/api/contact")
async def contact_endpoint(request: ContactRequest):
    contact = ContactMessage(
        first_name=request.firstName,
        last_name=request.lastName,
        email=request.email,
        message=request.message,
    )
    try:
        message_id = await mailer.send_contact(contact)
    except ValidationError as e:
        return _error(400, str(e))
    except MailerError as e:
        logger.error("Contact form delivery failed: %s", e)
        return _error(500, "Failed to send message")
    except Exception:
        logger.exception("Contact form error")
        return _error(500, "Internal server error")
    return {"success": True, "message": "Message sent successfully!", "messageId": message_id}


@app.post("/api/newsletter")
async def newsletter_endpoint(request: NewsletterRequest):
    try:
        message_id = await mailer.subscribe(request.email)
    except ValidationError as e:
        return _error(400, str(e))
    except MailerError as e:
        logger.error("Newsletter delivery failed: %s", e)
        return _error(500, "Failed to send email")
    except Exception:
        logger.exception("Newsletter subscription error")
        return _error(500, "Internal server error")
    return {"success": True, "message": "Newsletter subscription successful!", "messageId": message_id}


@app.get("/")
async def root():
    return {"status": "Muse Storefront API is running", "docs": "/docs"}


@app.get("/health")
async def health_check():
    return {"status": "ok", "products": len(catalogue.products), "loaded": catalogue.loaded}


if __name__ == "__main__":
    import uvicorn
    uvicorn.run(app, host="0.0.0.0", port=8000)
