"""
Wallet Store - Persistence of encrypted wallet records.

Records live in a key-value store under one fixed key, as a JSON object
keyed by wallet address. The backend is injected so the same store works
against memory (tests) or a JSON file on disk.
"""

import json
import logging
import threading
from pathlib import Path
from typing import Iterator, Optional, Protocol

from .crypto import EncryptedWalletRecord, set_secure_permissions
from .errors import CorruptedRecordError, WalletNotFoundError

logger = logging.getLogger(__name__)


STORAGE_KEY = "plt_wallet_encrypted"


# ============================================
# Key-Value Backends
# ============================================

class KeyValueStore(Protocol):
    """String-keyed persistence capability."""

    def get(self, key: str) -> Optional[str]:
        ...

    def set(self, key: str, value: str) -> None:
        ...

    def delete(self, key: str) -> None:
        ...


class MemoryKeyValueStore:
    """In-process key-value store. Contents vanish with the object."""

    def __init__(self, initial: Optional[dict[str, str]] = None):
        self._data: dict[str, str] = dict(initial or {})

    def get(self, key: str) -> Optional[str]:
        return self._data.get(key)

    def set(self, key: str, value: str) -> None:
        self._data[key] = value

    def delete(self, key: str) -> None:
        self._data.pop(key, None)


class JsonFileKeyValueStore:
    """
    Key-value store backed by a single JSON file.

    Writes go through a temp file and an atomic replace; the file is
    restricted to the owner.
    """

    def __init__(self, filepath: str | Path):
        self.filepath = Path(filepath)

    def _read(self) -> dict[str, str]:
        if not self.filepath.exists():
            return {}
        try:
            with open(self.filepath, 'r', encoding='utf-8') as f:
                data = json.load(f)
        except (json.JSONDecodeError, OSError) as e:
            logger.warning(f"Failed to read key-value file {self.filepath}: {e}")
            return {}
        if not isinstance(data, dict):
            logger.warning(f"Key-value file {self.filepath} is not an object, ignoring")
            return {}
        return data

    def _write(self, data: dict[str, str]) -> None:
        self.filepath.parent.mkdir(parents=True, exist_ok=True)
        temp_path = self.filepath.with_suffix('.tmp')
        with open(temp_path, 'w', encoding='utf-8') as f:
            json.dump(data, f, indent=2)
        set_secure_permissions(temp_path)
        temp_path.replace(self.filepath)

    def get(self, key: str) -> Optional[str]:
        value = self._read().get(key)
        return value if isinstance(value, str) else None

    def set(self, key: str, value: str) -> None:
        data = self._read()
        data[key] = value
        self._write(data)

    def delete(self, key: str) -> None:
        data = self._read()
        if key in data:
            del data[key]
            self._write(data)


# ============================================
# Encrypted Wallet Store
# ============================================

class EncryptedWalletStore:
    """
    Stores zero or more encrypted wallets, one per address.

    Saving an address that already exists overwrites it (last write wins).
    A missing or corrupted blob reads as an empty store, and individual
    bad records are skipped with a warning.
    """

    def __init__(self, backend: KeyValueStore, storage_key: str = STORAGE_KEY):
        self._backend = backend
        self._storage_key = storage_key
        self._lock = threading.RLock()

    def _read_all(self) -> dict[str, EncryptedWalletRecord]:
        """Load every valid record from the backend."""
        raw = self._backend.get(self._storage_key)
        if not raw:
            return {}

        try:
            data = json.loads(raw)
        except json.JSONDecodeError as e:
            logger.warning(f"Stored wallets could not be parsed, treating as empty: {e}")
            return {}

        if isinstance(data, dict) and "ciphertext" in data:
            # Single-wallet layout: one bare record
            entries = [data]
        elif isinstance(data, dict):
            entries = list(data.values())
        elif isinstance(data, list):
            entries = data
        else:
            logger.warning("Stored wallets have an unexpected shape, treating as empty")
            return {}

        records: dict[str, EncryptedWalletRecord] = {}
        for entry in entries:
            try:
                record = EncryptedWalletRecord.from_dict(entry)
            except CorruptedRecordError as e:
                logger.warning(f"Skipping corrupted wallet record: {e}")
                continue
            records[record.address] = record
        return records

    def _write_all(self, records: dict[str, EncryptedWalletRecord]) -> None:
        if not records:
            self._backend.delete(self._storage_key)
            return
        data = {address: record.to_dict() for address, record in records.items()}
        self._backend.set(self._storage_key, json.dumps(data))

    def save(self, record: EncryptedWalletRecord) -> None:
        """Insert or overwrite the record for its address."""
        with self._lock:
            records = self._read_all()
            replaced = record.address in records
            records[record.address] = record
            self._write_all(records)
        logger.info(f"{'Updated' if replaced else 'Saved'} encrypted wallet {record.address}")

    def load(self, address: str) -> Optional[EncryptedWalletRecord]:
        """Get the record for an address, or None."""
        with self._lock:
            return self._read_all().get(address)

    def load_all(self) -> list[EncryptedWalletRecord]:
        """All valid stored records (order not meaningful)."""
        with self._lock:
            return list(self._read_all().values())

    def addresses(self) -> list[str]:
        """Addresses of all stored wallets."""
        return [record.address for record in self.load_all()]

    def remove(self, address: str) -> bool:
        """Delete a wallet. Returns False if it was not stored."""
        with self._lock:
            records = self._read_all()
            if address not in records:
                return False
            del records[address]
            self._write_all(records)
        logger.info(f"Removed encrypted wallet {address}")
        return True

    def rename(self, address: str, label: Optional[str]) -> EncryptedWalletRecord:
        """
        Change a wallet's display name without re-encrypting.

        Raises:
            WalletNotFoundError: No wallet stored for address
        """
        with self._lock:
            records = self._read_all()
            if address not in records:
                raise WalletNotFoundError(f"Unknown wallet: {address}")
            renamed = records[address].with_label(label)
            records[address] = renamed
            self._write_all(records)
        return renamed

    def clear(self) -> None:
        """Forget every stored wallet."""
        with self._lock:
            self._backend.delete(self._storage_key)
        logger.info("Cleared all stored wallets")

    def __contains__(self, address: str) -> bool:
        return self.load(address) is not None

    def __len__(self) -> int:
        return len(self.load_all())

    def __iter__(self) -> Iterator[EncryptedWalletRecord]:
        return iter(self.load_all())
