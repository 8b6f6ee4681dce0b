#!/usr/bin/env python3
"""
Create the journal tables.

Run once against the Postgres database behind Supabase:

    DATABASE_URL=postgresql://... python scripts/setup_db_schema.py

Safe to re-run; every statement is IF NOT EXISTS.
"""
import os
import sys

import psycopg2
from dotenv import load_dotenv

SCHEMA_SQL = """
CREATE TABLE IF NOT EXISTS users (
    id SERIAL PRIMARY KEY,
    keycloak_sub VARCHAR(255) UNIQUE NOT NULL,
    email VARCHAR(255),
    name VARCHAR(255),
    created_at TIMESTAMPTZ DEFAULT CURRENT_TIMESTAMP
);

CREATE TABLE IF NOT EXISTS journal_entries (
    id SERIAL PRIMARY KEY,
    user_id INTEGER NOT NULL REFERENCES users(id) ON DELETE CASCADE,
    entry_date DATE NOT NULL DEFAULT CURRENT_DATE,
    answers JSONB NOT NULL,
    one_line_summary TEXT,
    four_sentence_summary TEXT,
    contentment_score INTEGER CHECK (contentment_score BETWEEN 0 AND 10),
    created_at TIMESTAMPTZ DEFAULT CURRENT_TIMESTAMP,
    UNIQUE (user_id, entry_date)
);

CREATE INDEX IF NOT EXISTS idx_journal_entries_user_date
    ON journal_entries (user_id, entry_date DESC);
"""


def main():
    load_dotenv()
    database_url = os.getenv("DATABASE_URL")
    if not database_url:
        print("DATABASE_URL is not set")
        sys.exit(1)

    print("Connecting to database...")
    conn = psycopg2.connect(database_url)
    try:
        with conn, conn.cursor() as cur:
            cur.execute(SCHEMA_SQL)
            print("✅ Schema created")

            cur.execute(
                "SELECT table_name, column_name, data_type FROM information_schema.columns "
                "WHERE table_name IN (%s, %s) ORDER BY table_name, ordinal_position",
                ("users", "journal_entries"),
            )
            current = None
            for table_name, column_name, data_type in cur.fetchall():
                if table_name != current:
                    print(f"\n{table_name}:")
                    current = table_name
                print(f"  - {column_name}: {data_type}")
    finally:
        conn.close()


if __name__ == "__main__":
    main()
