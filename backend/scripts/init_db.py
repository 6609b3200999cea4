#!/usr/bin/env python3
"""
Initialize the Apparel Platform database
=========================================

Creates every table declared under apparel.models (existing tables are left
untouched) and optionally seeds the default product categories.

Usage:
    python3 scripts/init_db.py
    python3 scripts/init_db.py --seed-categories
"""
import argparse
import logging
import os
import sys

from dotenv import load_dotenv

SCRIPT_DIR = os.path.dirname(os.path.abspath(__file__))
BACKEND_DIR = os.path.abspath(os.path.join(SCRIPT_DIR, '..'))
sys.path.insert(0, BACKEND_DIR)
load_dotenv(os.path.join(BACKEND_DIR, '.env'))

from apparel.core.database import create_schema  # noqa: E402
from apparel.core.exceptions import ConflictError  # noqa: E402
from apparel.domain.catalog import CategoryCreate  # noqa: E402
from apparel.services.catalog_service import CatalogService  # noqa: E402

DEFAULT_CATEGORIES = [
    ("T-Shirts", "Classic crew and v-neck tees"),
    ("Polo Shirts", "Collared shirts for teams and uniforms"),
    ("Hoodies", "Pullover and zip hoodies"),
    ("Long Sleeves", "Long sleeve tees"),
]

logger = logging.getLogger("init_db")


def seed_categories(service: CatalogService) -> int:
    created = 0
    for name, description in DEFAULT_CATEGORIES:
        try:
            service.create_category(CategoryCreate(name=name, description=description))
            created += 1
            logger.info(f"Created category {name}")
        except ConflictError:
            logger.info(f"Category {name} already exists")
    return created


def main():
    parser = argparse.ArgumentParser(description="Create the database schema")
    parser.add_argument("--seed-categories", action="store_true", help="Insert the default product categories")
    args = parser.parse_args()

    logging.basicConfig(level=logging.INFO, format="%(levelname)s %(message)s")

    create_schema()
    logger.info("Schema ready")

    if args.seed_categories:
        created = seed_categories(CatalogService())
        logger.info(f"{created} categories created")


if __name__ == "__main__":
    main()
