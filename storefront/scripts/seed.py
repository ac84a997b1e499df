"""
One-shot database seeding with reference data and sample comments. Run from project root:

  python -m storefront.scripts.seed [DATA_DIR]

DATA_DIR defaults to the bundled seed_data/ directory. Each table is read from
<table>.json (a list of row objects); missing files are skipped. Everything is
inserted in one transaction, so a failure leaves the database untouched.
"""

import argparse
import json
import logging
import sys
from pathlib import Path

from sqlalchemy import insert
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from storefront.core.database import SessionLocal
from storefront.models import City, Comment, District, Ward

logging.basicConfig(
    level=logging.INFO,
    format="%(asctime)s %(levelname)s %(name)s %(message)s",
    datefmt="%Y-%m-%dT%H:%M:%SZ",
)
logger = logging.getLogger(__name__)

DEFAULT_DATA_DIR = Path(__file__).parent / "seed_data"

# Parents before children so foreign keys resolve.
SEED_ORDER = (City, District, Ward, Comment)


def load_rows(data_dir: Path, table: str) -> list[dict]:
    path = data_dir / f"{table}.json"
    if not path.exists():
        return []
    with path.open(encoding="utf-8") as f:
        rows = json.load(f)
    if not isinstance(rows, list):
        raise ValueError(f"{path} must contain a JSON list of objects")
    return rows


def run_seed(session: Session, data_dir: Path) -> dict[str, int]:
    """Insert every seed file found in data_dir; return rows inserted per table."""
    counts: dict[str, int] = {}
    for model in SEED_ORDER:
        table = model.__tablename__
        rows = load_rows(data_dir, table)
        if rows:
            session.execute(insert(model), rows)
        counts[table] = len(rows)
    session.commit()
    return counts


def main() -> int:
    parser = argparse.ArgumentParser(description="Seed the Storefront database.")
    parser.add_argument("data_dir", nargs="?", type=Path, default=DEFAULT_DATA_DIR)
    args = parser.parse_args()

    db = SessionLocal()
    try:
        counts = run_seed(db, args.data_dir)
        logger.info("Seed completed: %s", counts)
        return 0
    except (SQLAlchemyError, ValueError, OSError) as e:
        db.rollback()
        logger.exception("Seed failed: %s", e)
        return 1
    finally:
        db.close()


if __name__ == "__main__":
    sys.exit(main())
