#!/usr/bin/env python3
"""
Seed a demo SQLite container for the structured-data collector.

Creates data/sqlite/music.db (relative to project root) with two tables,
artists and albums, and inserts demo rows. Use --reset to drop and recreate.

Run from project root:

    python scripts/seed_sqlite.py
    python scripts/seed_sqlite.py --reset
"""

import argparse
import sqlite3
from pathlib import Path

_ROOT = Path(__file__).resolve().parent.parent
DB_PATH = _ROOT / "data" / "sqlite" / "music.db"

ARTISTS = [
    (1, "AC/DC", "Australia"),
    (2, "Accept", "Germany"),
    (3, "Aerosmith", "United States"),
    (4, "Alanis Morissette", "Canada"),
    (5, "Antonio Carlos Jobim", "Brazil"),
]

ALBUMS = [
    (1, "For Those About To Rock We Salute You", 1, 1981),
    (2, "Balls to the Wall", 2, 1983),
    (3, "Restless and Wild", 2, 1982),
    (4, "Let There Be Rock", 1, 1977),
    (5, "Big Ones", 3, 1994),
    (6, "Jagged Little Pill", 4, 1995),
    (7, "Wave", 5, 1967),
]


def main() -> None:
    parser = argparse.ArgumentParser(description="Seed the demo music.db container.")
    parser.add_argument(
        "--reset",
        action="store_true",
        help="Drop the demo tables before inserting rows.",
    )
    args = parser.parse_args()

    DB_PATH.parent.mkdir(parents=True, exist_ok=True)
    conn = sqlite3.connect(str(DB_PATH))
    try:
        if args.reset:
            conn.execute("DROP TABLE IF EXISTS albums")
            conn.execute("DROP TABLE IF EXISTS artists")
            print("Dropped existing demo tables.")
        conn.execute(
            "CREATE TABLE IF NOT EXISTS artists (id INTEGER PRIMARY KEY, name TEXT NOT NULL, country TEXT)"
        )
        conn.execute(
            "CREATE TABLE IF NOT EXISTS albums ("
            "id INTEGER PRIMARY KEY, title TEXT NOT NULL, artist_id INTEGER REFERENCES artists(id), year INTEGER)"
        )
        conn.executemany("INSERT OR REPLACE INTO artists VALUES (?, ?, ?)", ARTISTS)
        conn.executemany("INSERT OR REPLACE INTO albums VALUES (?, ?, ?, ?)", ALBUMS)
        conn.commit()
    finally:
        conn.close()

    print(f"Done. Seeded {len(ARTISTS)} artists and {len(ALBUMS)} albums into {DB_PATH}.")


if __name__ == "__main__":
    main()
