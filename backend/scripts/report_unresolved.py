#!/usr/bin/env python3
"""
List ingredient names that missed the reference table, most frequent first,
so they can be curated into data/halal_reference.json.
Usage: cd backend && python scripts/report_unresolved.py [--min-frequency 2]
"""
import argparse
import sys
from pathlib import Path

# Ensure backend is on path
sys.path.insert(0, str(Path(__file__).resolve().parent.parent))


def main():
    parser = argparse.ArgumentParser(description="Report unresolved ingredients for reference curation")
    parser.add_argument("--min-frequency", type=int, default=1, help="Min times seen to include")
    args = parser.parse_args()

    from halalcheck.enrichment.unresolved_log import UnresolvedIngredientsLog

    log = UnresolvedIngredientsLog()
    keys = log.get_keys_for_curation(min_frequency=args.min_frequency)
    if not keys:
        print("No unresolved ingredients.")
        return 0
    entries = log.get_entries()
    for key in keys:
        e = entries[key]
        print(f"{e.get('frequency', 0):5d}  {key}  last_status={e.get('last_status')}  languages={','.join(e.get('languages', []))}")
    return 0


if __name__ == "__main__":
    sys.exit(main())
