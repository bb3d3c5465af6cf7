from .catalogue import CatalogueService, derive_facets, default_filter_spec, query
from .content import AbstractContentSource, ContentFetchError, DatoCMSContentSource
from .fit import FIT_BANDS, build_contact_link, build_contact_message, evaluate
from .mailer import BrevoMailer, MailerError, ValidationError
from .models import Color, FilterSpec, Measurement, Product, Review, SizeModel, SortOrder

__all__ = [
    "AbstractContentSource",
    "BrevoMailer",
    "CatalogueService",
    "Color",
    "ContentFetchError",
    "DatoCMSContentSource",
    "FIT_BANDS",
    "FilterSpec",
    "MailerError",
    "Measurement",
    "Product",
    "Review",
    "SizeModel",
    "SortOrder",
    "ValidationError",
    "build_contact_link",
    "build_contact_message",
    "default_filter_spec",
    "derive_facets",
    "evaluate",
    "query",
]
