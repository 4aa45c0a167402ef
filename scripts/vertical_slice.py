#!/usr/bin/env python3
"""
Vertical slice: Register players → Generate round → Persist → Retrieve.
Run from project root: python3 scripts/vertical_slice.py
"""
from __future__ import annotations

import sys
from pathlib import Path

# Ensure project root on path
PROJECT_ROOT = Path(__file__).resolve().parent.parent
sys.path.insert(0, str(PROJECT_ROOT))

from backend.matching import SeededRNG
from backend.persistence import init_db, get_connection, PlayerRepository, MatchRepository
from backend.persistence.db import set_db_path
from backend.services import MatchService, RosterService

DEMO_NAMES = ["Ana", "Ben", "Cleo", "Dev", "Eli", "Fay", "Gus", "Hana", "Ivo"]


def main() -> None:
    # Use data/vertical_slice.db for demo (distinct from pickleball.db)
    db_path = PROJECT_ROOT / "data" / "vertical_slice.db"
    set_db_path(db_path)
    init_db(db_path=db_path)

    conn = get_connection()
    try:
        roster = RosterService()
        player_repo = PlayerRepository()
        match_repo = MatchRepository()

        # 1. Ensure the roster has players
        if player_repo.count(conn) == 0:
            for name in DEMO_NAMES:
                roster.register(conn, name)
            print(f"Registered {len(DEMO_NAMES)} players")

        # 2. Bench one player to show availability filtering
        benched = roster.list_players(conn)[-1]
        roster.set_availability(conn, benched.id, False)
        print(f"Benched: {benched.name}")

        # 3. Generate a two-court round with a fixed seed
        generated = MatchService().generate_round(conn, num_courts=2, rng=SeededRNG(2024))
        print(f"Generated match group {generated.match_group} ({generated.num_courts} courts)")
        for court in generated.courts:
            print(f"  Court {court.court + 1}: {[p.name for p in court.serving]} vs {[p.name for p in court.receiving]}")

        # 4. Retrieve persisted rows
        stored = match_repo.list_by_group(conn, generated.match_group, generated.num_courts)
        assert len(stored) == generated.num_courts
        print(f"Retrieved {len(stored)} matches; next group is {match_repo.next_group(conn, 2)}")

        print("\nVertical slice complete.")
    finally:
        conn.close()


if __name__ == "__main__":
    main()
