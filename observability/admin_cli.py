"""Lightweight CLI helpers for inspecting stored practice sessions."""
from __future__ import annotations

import argparse
import json
import sqlite3
from typing import List, Optional

from config.settings import settings


def tail_sessions(limit: int = 20, db_path: Optional[str] = None) -> List[str]:
    conn = sqlite3.connect(db_path or settings.DB_PATH)
    try:
        cursor = conn.cursor()
        cursor.execute(
            """
            SELECT updated_at, id, user_id, status, payload
            FROM practice_sessions
            ORDER BY updated_at DESC
            LIMIT ?
            """,
            (limit,),
        )
        lines = []
        for row in cursor.fetchall():
            ts, session_id, user_id, status, payload = row
            data = json.loads(payload)
            answered = len(data.get("responses") or [])
            total = len(data.get("questions") or [])
            title = (data.get("config") or {}).get("job_title", "?")
            lines.append(
                f"[{ts}] {session_id} user={user_id} {status} role={title} answered={answered}/{total} "
                f"rate={data.get('completion_rate', 0)}"
            )
        return lines
    finally:
        conn.close()


def main(argv: Optional[List[str]] = None) -> None:
    parser = argparse.ArgumentParser()
    parser.add_argument("--tail-sessions", type=int, help="Show the most recently updated practice sessions")
    parser.add_argument("--db-path", help="Override the configured database path")
    args = parser.parse_args(argv)

    if args.tail_sessions:
        for line in tail_sessions(args.tail_sessions, args.db_path):
            print(line)


if __name__ == "__main__":
    main()
