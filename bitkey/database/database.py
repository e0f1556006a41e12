"""
The WalletStore class - holds wallet records and their address keys

Wallet records are JSON objects upserted by name. Address keys are opaque strings stored per (wallet name, address).
Every call opens and closes its own connection unless keep_alive=True, in which case the connection stays open for
the following calls until one of them runs without keep_alive or close() is called.
"""
import json
import sqlite3
from contextlib import contextmanager
from pathlib import Path

from bitkey.core import StorageError, get_logger

DB_PATH = Path(__file__).parent / "db_files" / "bitkey.db"

__all__ = ["WalletStore"]

logger = get_logger(__name__)

# Fields that are never persisted with a wallet record
TRANSIENT_FIELDS = ("storage", "client", "_id")
LITE_FIELDS = ("masterKey", "pubKey")
LISTED_FIELDS = ("name", "chain", "network", "storageType")


class WalletStore:
    def __init__(self, db_path: Path | str = DB_PATH):
        self.db_path = Path(db_path)
        self.db_path.parent.mkdir(parents=True, exist_ok=True)  # Make sure file folder exists
        self._conn: sqlite3.Connection | None = None
        self._initialize_database()

    def _initialize_database(self):
        """Creates necessary tables if they do not exist."""
        with self._session() as conn:
            conn.execute('''
                CREATE TABLE IF NOT EXISTS wallets (
                    name    TEXT    NOT NULL,
                    data    TEXT    NOT NULL,   -- JSON record
                    PRIMARY KEY (name)
                )
            ''')
            conn.execute('''
                CREATE TABLE IF NOT EXISTS address_keys (
                    id      INTEGER PRIMARY KEY AUTOINCREMENT,
                    name    TEXT    NOT NULL,
                    address TEXT    NOT NULL,
                    data    TEXT    NOT NULL    -- opaque payload
                )
            ''')
            conn.execute("CREATE INDEX IF NOT EXISTS address_keys_name ON address_keys (name, address)")

    @contextmanager
    def _session(self, keep_alive: bool = False):
        conn = self._conn or sqlite3.connect(self.db_path)
        try:
            with conn:
                yield conn
        finally:
            if keep_alive:
                self._conn = conn
            else:
                conn.close()
                self._conn = None

    def close(self):
        if self._conn is not None:
            self._conn.close()
            self._conn = None

    # --- WALLETS --- #

    def save_wallet(self, wallet: dict) -> None:
        """
        Upsert a wallet record by name. Fields of an existing record not present in wallet are kept.
        """
        name = wallet.get("name")
        if not name:
            raise StorageError("Wallet record requires a name")

        record = {k: v for k, v in wallet.items() if k not in TRANSIENT_FIELDS}
        if record.get("lite"):
            for k in LITE_FIELDS:
                record.pop(k, None)
        if isinstance(record.get("authKey"), bytes):
            record["authKey"] = record["authKey"].hex()

        existing = self.load_wallet(name) or {}
        existing.update(record)
        try:
            data = json.dumps(existing)
        except (TypeError, ValueError) as e:
            raise StorageError(f"Wallet record {name} is not JSON serializable") from e

        with self._session() as conn:
            conn.execute(
                "INSERT INTO wallets(name, data) VALUES (?, ?) "
                "ON CONFLICT(name) DO UPDATE SET data=excluded.data",
                (name, data),
            )
        logger.debug(f"Saved wallet {name}")

    def load_wallet(self, name: str) -> dict | None:
        with self._session() as conn:
            row = conn.execute("SELECT data FROM wallets WHERE name=?", (name,)).fetchone()
        if not row:
            return None
        return json.loads(row[0])

    def delete_wallet(self, name: str) -> None:
        with self._session() as conn:
            conn.execute("DELETE FROM wallets WHERE name=?", (name,))
        logger.debug(f"Deleted wallet {name}")

    def list_wallets(self) -> list[dict]:
        with self._session() as conn:
            rows = conn.execute("SELECT data FROM wallets ORDER BY name").fetchall()
        wallets = []
        for (data,) in rows:
            record = json.loads(data)
            wallets.append({k: record[k] for k in LISTED_FIELDS if k in record})
        return wallets

    # --- ADDRESS KEYS --- #

    def add_address_key(self, name: str, address: str, data: str, keep_alive: bool = False) -> None:
        if not isinstance(data, str):
            raise StorageError("Address key data must be a string")
        with self._session(keep_alive) as conn:
            conn.execute(
                "INSERT INTO address_keys(name, address, data) VALUES (?, ?, ?)",
                (name, address, data),
            )

    def get_address_key(self, name: str, address: str, keep_alive: bool = False) -> str | None:
        with self._session(keep_alive) as conn:
            row = conn.execute(
                "SELECT data FROM address_keys WHERE name=? AND address=? ORDER BY id LIMIT 1",
                (name, address),
            ).fetchone()
        return row[0] if row else None

    def list_address_keys(self, name: str, limit: int | None = None, skip: int | None = None) -> list[dict]:
        """
        Address keys of a wallet in insertion order as {"address", "data"} dicts
        """
        with self._session() as conn:
            rows = conn.execute(
                "SELECT address, data FROM address_keys WHERE name=? ORDER BY id LIMIT ? OFFSET ?",
                (name, -1 if limit is None else limit, skip or 0),
            ).fetchall()
        return [{"address": address, "data": data} for address, data in rows]

    def get_address(self, name: str, address: str, keep_alive: bool = False) -> dict | None:
        """
        The public key and path stored in an address key payload
        """
        data = self.get_address_key(name, address, keep_alive)
        if data is None:
            return None
        return {"address": address, **self._parse_address_data(data)}

    def list_addresses(self, name: str, limit: int | None = None, skip: int | None = None) -> list[dict]:
        return [{"address": k["address"], **self._parse_address_data(k["data"])}
                for k in self.list_address_keys(name, limit, skip)]

    @staticmethod
    def _parse_address_data(data: str) -> dict:
        try:
            payload = json.loads(data)
            return {"pubKey": payload.get("pubKey"), "path": payload.get("path")}
        except (ValueError, AttributeError) as e:
            raise StorageError("Address key data is not a JSON object") from e

    def wipe_db(self):
        """Drop and recreate all tables"""
        with self._session() as conn:
            conn.execute("DROP TABLE IF EXISTS wallets")
            conn.execute("DROP TABLE IF EXISTS address_keys")
        self._initialize_database()
