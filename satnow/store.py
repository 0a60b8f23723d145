"""sqlite-backed store of TLE records, keyed by catalog number."""

import logging
import sqlite3

from satnow.errors import StoreError
from satnow.tle import OrbitalRecord

logger = logging.getLogger(__name__)

SCHEMA = (
    "CREATE TABLE IF NOT EXISTS tle "
    "(timestamp TIMESTAMP DEFAULT CURRENT_TIMESTAMP, "
    "norad INT PRIMARY KEY, "
    "name TEXT, line1 TEXT, line2 TEXT)"
)


class RecordStore:
    def __init__(self, conn: sqlite3.Connection, path: str):
        self.conn = conn
        self.path = path

    @classmethod
    def open(cls, path):
        if not path:
            raise StoreError("the store path must not be empty")
        try:
            conn = sqlite3.connect(path)
            conn.execute(SCHEMA)
            conn.commit()
        except sqlite3.Error as e:
            raise StoreError(f"error opening store '{path}': {e}") from e
        logger.debug("opened store %s", path)
        return cls(conn, path)

    def upsert(self, records):
        """insert or replace each record by catalog number"""
        rows = [(r.catalog_id, r.name, r.line1, r.line2) for r in records]
        try:
            with self.conn:
                self.conn.executemany(
                    "INSERT OR REPLACE INTO tle (norad, name, line1, line2) VALUES (?, ?, ?, ?)",
                    rows,
                )
        except sqlite3.Error as e:
            raise StoreError(f"error updating store '{self.path}': {e}") from e
        return len(rows)

    def fetch_all(self):
        try:
            rows = self.conn.execute("SELECT name, line1, line2 FROM tle ORDER BY norad").fetchall()
        except sqlite3.Error as e:
            raise StoreError(f"error querying store '{self.path}': {e}") from e

        records = []
        for name, line1, line2 in rows:
            try:
                records.append(OrbitalRecord.from_lines(name or "", line1 or "", line2 or ""))
            except ValueError as e:
                logger.warning("skipping stored record: %s", e)
        return records

    def updated_at(self, catalog_id):
        row = self.conn.execute("SELECT timestamp FROM tle WHERE norad = ?", (catalog_id,)).fetchone()
        return row[0] if row else None

    def __len__(self):
        return self.conn.execute("SELECT COUNT(*) FROM tle").fetchone()[0]

    def close(self):
        self.conn.close()

    def __enter__(self):
        return self

    def __exit__(self, *exc):
        self.close()
