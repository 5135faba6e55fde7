"""
Seed script for the CityFix report store (Firebase Realtime Database).

Usage:
  - Dry run (default): python scripts/seed_db.py
  - Apply to the configured database: python scripts/seed_db.py --apply
  - Use another seed file: python scripts/seed_db.py --seed ./other.json

Behavior:
  - Loads `mock_db.json` (shape: {"reports": {id: record}}) from repo root.
  - Writes each report to /<REPORTS_PATH>/<id> via `cityfix.config.firebase.get_reports_reference()`.

NOTE: With USE_MOCK_DB=true the app reads the same file directly, so seeding is only
needed for a real database. Ensure FIREBASE_DATABASE_URL and FIREBASE_CREDENTIALS_PATH
are set in `.env` before running with --apply.
"""

import argparse
import json
import os
from typing import Any


def load_seed(path: str = "./mock_db.json") -> dict:
    with open(path, "r", encoding="utf-8") as f:
        return json.load(f)


def write_to_db(reference: Any, seed: dict, apply: bool = False):
    for report_id, data in (seed.get("reports") or {}).items():
        print(f"Preparing: reports/{report_id}")
        if not apply:
            continue
        try:
            reference.child(report_id).set(data)
            print(f"Wrote: reports/{report_id}")
        except Exception as e:
            print(f"Failed to write reports/{report_id}: {e}")


def main():
    parser = argparse.ArgumentParser()
    parser.add_argument("--apply", action="store_true", help="Write seed to the database instead of dry-run")
    parser.add_argument("--seed", default="mock_db.json", help="Seed file relative to the working directory")
    args = parser.parse_args()

    seed_path = os.path.join(os.getcwd(), args.seed)
    if not os.path.exists(seed_path):
        print(f"Seed file not found: {seed_path}")
        return

    seed = load_seed(seed_path)

    reference = None
    if args.apply:
        from cityfix.config.firebase import get_reports_reference
        reference = get_reports_reference()

    write_to_db(reference, seed, apply=args.apply)

    if args.apply:
        print("Seeding completed.")
    else:
        print("Dry run complete. Re-run with --apply to write to the database.")


if __name__ == "__main__":
    main()
