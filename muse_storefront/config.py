import os

from dotenv import load_dotenv

load_dotenv()

# DatoCMS content delivery API
DATOCMS_ENDPOINT = "https://graphql.datocms.com/"
DATOCMS_API_TOKEN = os.getenv("NEXT_DATOCMS_API_TOKEN") or os.getenv("NEXT_PUBLIC_DATOCMS_API_TOKEN")
DATOCMS_ENVIRONMENT = os.getenv("NEXT_DATOCMS_ENVIRONMENT", "main")

# Brevo transactional email API
BREVO_ENDPOINT = "https://api.brevo.com/v3/smtp/email"
BREVO_API_KEY = os.getenv("BREVO_API_KEY")
BREVO_SENDER_NAME = os.getenv("BREVO_SENDER_NAME")
BREVO_SENDER_EMAIL = os.getenv("BREVO_SENDER_EMAIL")

CONTACT_SENDER_NAME = "Muse Contact Form"
NEWSLETTER_SENDER_NAME = "Muse Newsletter"
DEFAULT_SENDER_EMAIL = "noreply@muse.com"
DEFAULT_INBOX_EMAIL = "toyourmuse@gmail.com"

HTTP_TIMEOUT = float(os.getenv("HTTP_TIMEOUT", "10")) # Seconds per outbound request
CATALOGUE_TTL = float(os.getenv("CATALOGUE_TTL", "300")) # Seconds before the product set is fetched again

# Fit check contact link
WHATSAPP_HOST = "wa.me"
DEFAULT_PHONE_NUMBER = "6289602446618"
NOT_PROVIDED = "[tidak diisi]" # Shown in place of a missing measurement

# Catalogue
PRICE_CEILING = 999999999 # Upper price bound meaning "no limit"
ALL_SIZE = "all_size" # Size tag for items that fit all sizes
PLACEHOLDER_IMAGE = "/placeholder-image.jpg"

CORS_ORIGINS = [o.strip() for o in os.getenv("CORS_ORIGINS", "*").split(",") if o.strip()]
