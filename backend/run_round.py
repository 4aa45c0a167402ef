"""
Generate one round of matches from the local roster and print the court assignments.
Run from project root: python -m backend.run_round --courts 2
"""
from __future__ import annotations

import argparse
import logging
from pathlib import Path

from backend.config import get_log_level
from backend.matching import NotEnoughPlayersError, SeededRNG
from backend.models import GeneratedRound
from backend.persistence.db import get_connection, get_db_path, init_db, set_db_path
from backend.services import MatchService

logger = logging.getLogger(__name__)


def _print_round(generated: GeneratedRound) -> None:
    label = "match" if generated.num_courts == 1 else "matches"
    print(f"\n  Match #{generated.match_group}  ({generated.num_courts} {label})")
    print("  " + "-" * 56)
    for court in generated.courts:
        serving = " & ".join(p.name for p in court.serving)
        receiving = " & ".join(p.name for p in court.receiving)
        print(f"  Court {court.court + 1}:  {serving}  (serve)  vs  {receiving}")


def run(num_courts: int, seed: int | None = None, db_path: Path | None = None) -> GeneratedRound:
    if db_path is not None:
        set_db_path(db_path)
    init_db(get_db_path())
    conn = get_connection()
    try:
        generated = MatchService().generate_round(conn, num_courts, SeededRNG(seed))
    finally:
        conn.close()
    _print_round(generated)
    return generated


def main() -> None:
    parser = argparse.ArgumentParser(description="Generate a round of doubles matches from available players.")
    parser.add_argument("--courts", type=int, default=1, help="Number of courts to fill")
    parser.add_argument("--seed", type=int, default=None, help="RNG seed for reproducibility")
    parser.add_argument("--db", type=Path, default=None, help="SQLite file (default from PICKLEBALL_DB_PATH)")
    args = parser.parse_args()
    logging.basicConfig(level=get_log_level())
    if args.courts < 1:
        raise SystemExit("--courts must be at least 1")
    try:
        run(args.courts, seed=args.seed, db_path=args.db)
    except NotEnoughPlayersError as e:
        raise SystemExit(str(e))


if __name__ == "__main__":
    main()
