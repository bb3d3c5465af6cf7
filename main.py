"""Simple CLI entry point for browsing the Muse catalogue."""

import asyncio
import logging
from typing import List

from muse_storefront import CatalogueService, DatoCMSContentSource, SortOrder
from muse_storefront.catalogue import (
    set_search_text,
    toggle_color,
    toggle_popularity_sort,
    toggle_price_sort,
    toggle_size,
)
from muse_storefront.fit import build_contact_link, build_contact_message, evaluate, parse_measurement
from muse_storefront.models import FilterSpec, Product
from muse_storefront.utils import format_price, format_size

HELP = (
    "Type text to search by name, or one of:\n"
    "  sort price asc|desc    sort popular asc|desc\n"
    "  color <name>           size <tag>\n"
    "  fit <height> <weight>  reset    exit"
)

ORDERS = {"asc": SortOrder.ASCENDING, "desc": SortOrder.DESCENDING}


def print_products(products: List[Product]) -> None:
    if not products:
        print("No products found.\n")
        return
    for i, p in enumerate(products, 1):
        colors = ", ".join(c.name for c in p.colors) or "-"
        print(f"{i}. {p.name}\n   - {format_price(p.price)} | {format_size(p.size)} | {colors} | sold {p.sold_count}")
    print()


def apply_command(spec: FilterSpec, user_input: str, default: FilterSpec) -> FilterSpec:
    """Turn one line of input into the next FilterSpec."""
    parts = user_input.split()
    command = parts[0].lower()
    if command == "sort" and len(parts) == 3 and parts[2].lower() in ORDERS:
        order = ORDERS[parts[2].lower()]
        if parts[1].lower() == "price":
            return toggle_price_sort(spec, order)
        if parts[1].lower() in {"popular", "popularity"}:
            return toggle_popularity_sort(spec, order)
    if command == "color" and len(parts) > 1:
        return toggle_color(spec, " ".join(parts[1:]))
    if command == "size" and len(parts) == 2:
        return toggle_size(spec, parts[1])
    if command == "reset":
        return default
    return set_search_text(spec, user_input)


def check_fit(args: List[str]) -> None:
    height = parse_measurement(args[0]) if args else None
    weight = parse_measurement(args[1]) if len(args) > 1 else None
    if evaluate(height, weight):
        print("Good news: our all size pieces fit you.\n")
        return
    message = build_contact_message(None, height, weight)
    print("We could not find a match. Ask us on WhatsApp:")
    print(f"{build_contact_link(message)}\n")


async def main() -> None:
    logging.basicConfig(level=logging.WARNING)
    catalogue = CatalogueService(DatoCMSContentSource())
    await catalogue.load()
    spec = catalogue.default_spec()
    print(f"Muse catalogue is ready ({len(catalogue.products)} products). Type 'help' for commands.")

    while True:
        try:
            user_input = input("Search: ").strip()
        except (KeyboardInterrupt, EOFError):
            print("\nExiting.")
            break

        if not user_input:
            print_products(catalogue.browse(spec))
            continue
        if user_input.lower() in {"exit", "quit"}:
            print("Goodbye.")
            break
        if user_input.lower() == "help":
            print(HELP)
            continue
        if user_input.split()[0].lower() == "fit":
            check_fit(user_input.split()[1:])
            continue

        spec = apply_command(spec, user_input, catalogue.default_spec())
        print_products(catalogue.browse(spec))

    print("Session ended.")


if __name__ == "__main__":
    asyncio.run(main())
