#!/usr/bin/env python3
"""
Seed the clothing catalog: categories, products and their size variants.

With --file the products come from a JSON list (or an object with an
"items" list); otherwise a small built-in catalog is used. Existing rows
(matched by slug) are left alone, so the script can be re-run.

Usage:
    python scripts/seed_products.py
    python scripts/seed_products.py --file ../mock/catalog.json --reset
"""
import argparse
import json
import os
import re
import sys

# allow running from repo/scripts
sys.path.append(os.path.abspath(os.path.join(os.path.dirname(__file__), "..")))

from storefront.db import SessionLocal, init_db
from storefront.models.product import Product
from storefront.models.product_size import ProductSize
from storefront.repositories.category_repo import CategoryRepository
from storefront.repositories.product_repo import ProductRepository

DEFAULT_CATEGORIES = ["Dresses", "Shirts", "Pants", "Summer", "Sale"]

DEFAULT_PRODUCTS = [
    {
        "name": "Linen Shirt",
        "price": 199.9,
        "original_price": 249.9,
        "description": "Loose fit linen shirt",
        "categories": ["Shirts", "Summer", "Sale"],
        "sizes": {"P": 4, "M": 6, "G": 2},
    },
    {
        "name": "Midi Dress",
        "price": 329.0,
        "description": "Viscose midi dress with side slit",
        "categories": ["Dresses", "Summer"],
        "sizes": {"P": 3, "M": 0, "G": 1},
    },
    {
        "name": "Wide Leg Pants",
        "price": 259.0,
        "categories": ["Pants"],
        "sizes": {"36": 2, "38": 5, "40": 0, "42": 1},
    },
]


def slugify(value: str) -> str:
    return re.sub(r"[^a-z0-9]+", "-", (value or "").lower()).strip("-")


def _normalize_entry(entry):
    """Return a dict with keys: name, slug, price, original_price, description, categories, sizes"""
    name = entry.get("name") or entry.get("title") or ""
    try:
        price = float(entry.get("price", 0) or 0)
    except (TypeError, ValueError):
        price = 0.0
    original = entry.get("original_price")
    try:
        original = float(original) if original is not None else None
    except (TypeError, ValueError):
        original = None

    sizes = entry.get("sizes") or {}
    if isinstance(sizes, list):
        # [{"size": "M", "stock_quantity": 3}, ...]
        sizes = {s.get("size"): int(s.get("stock_quantity", 0) or 0) for s in sizes if s.get("size")}

    return {
        "name": name,
        "slug": entry.get("slug") or slugify(name),
        "price": price,
        "original_price": original,
        "description": entry.get("description") or "",
        "categories": list(entry.get("categories") or []),
        "sizes": sizes,
    }


def load_entries(path):
    with open(path, "r", encoding="utf-8") as f:
        try:
            data = json.load(f)
        except ValueError as e:
            raise RuntimeError(f"Failed to parse JSON from {path}: {e}")
    if isinstance(data, dict):
        data = data.get("items", list(data.values()))
    return data if isinstance(data, list) else []


def seed(entries, reset=False):
    init_db(reset=reset)
    db = SessionLocal()
    products = ProductRepository(db)
    categories = CategoryRepository(db)
    created = 0
    try:
        by_name = {}
        names = set(DEFAULT_CATEGORIES)
        for entry in entries:
            names.update(entry["categories"])
        for name in sorted(names):
            cat = categories.get_by_slug(slugify(name)) or categories.create(name, slugify(name))
            by_name[name] = cat

        for entry in entries:
            if not entry["name"]:
                continue
            if db.query(Product).filter(Product.slug == entry["slug"]).first():
                continue
            sizes = entry["sizes"]
            p = products.create(
                name=entry["name"],
                slug=entry["slug"],
                price=entry["price"],
                original_price=entry["original_price"],
                description=entry["description"],
                stock_quantity=sum(sizes.values()),
            )
            for name in entry["categories"]:
                p.categories.append(by_name[name])
            for label, stock in sizes.items():
                db.add(
                    ProductSize(
                        product_id=p.id,
                        size=str(label),
                        stock_quantity=int(stock),
                        is_active=int(stock) > 0,
                    )
                )
            created += 1

        db.commit()
        print("Seeded products:", created)
    except Exception:
        db.rollback()
        raise
    finally:
        db.close()


if __name__ == "__main__":
    parser = argparse.ArgumentParser()
    parser.add_argument("--file", "-f", default=None, help="Path to a product JSON list")
    parser.add_argument("--reset", action="store_true", help="Drop and recreate all tables first")
    args = parser.parse_args()
    if args.file:
        if not os.path.exists(args.file):
            print("File not found:", args.file)
            sys.exit(1)
        raw = load_entries(args.file)
    else:
        raw = DEFAULT_PRODUCTS
    seed([_normalize_entry(e) for e in raw], reset=args.reset)
