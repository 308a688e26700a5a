#!/usr/bin/env python3
"""
Push data/halal_reference.json into the Supabase `ingredients` table (upsert on id).
Usage: cd backend && python scripts/seed_reference.py [--dry-run]
"""
import argparse
import logging
import sys
from pathlib import Path

# Ensure backend is on path
sys.path.insert(0, str(Path(__file__).resolve().parent.parent))

from dotenv import load_dotenv
load_dotenv(Path(__file__).resolve().parent.parent / ".env")

logging.basicConfig(level=logging.INFO)
logger = logging.getLogger(__name__)

BATCH_SIZE = 50


def seed(client, rows: list[dict], batch_size: int = BATCH_SIZE) -> int:
    written = 0
    for start in range(0, len(rows), batch_size):
        batch = rows[start:start + batch_size]
        client.table("ingredients").upsert(batch, on_conflict="id").execute()
        written += len(batch)
        logger.info("SEED upserted %d/%d", written, len(rows))
    return written


def main():
    parser = argparse.ArgumentParser(description="Seed the Supabase ingredients table from the reference JSON")
    parser.add_argument("--dry-run", action="store_true", help="Validate and count rows without writing")
    args = parser.parse_args()

    from supabase import create_client
    from halalcheck.config import get_supabase_key, get_supabase_url
    from halalcheck.reference.reference_registry import ReferenceRegistry
    from halalcheck.reference.supabase_store import reference_to_row

    registry = ReferenceRegistry()
    rows = [reference_to_row(r) for r in registry.rows()]
    if not rows:
        logger.error("No reference ingredients to seed.")
        return 1
    if args.dry_run:
        logger.info("DRY-RUN would upsert %d rows (reference_version=%s)", len(rows), registry.get_version())
        return 0

    url, key = get_supabase_url(), get_supabase_key()
    if not url or not key:
        logger.error("Supabase credentials missing.")
        return 1
    try:
        seed(create_client(url, key), rows)
    except Exception as e:
        logger.error("Seeding failed: %s", e)
        return 1
    logger.info("Seeding complete: %d rows", len(rows))
    return 0


if __name__ == "__main__":
    sys.exit(main())
