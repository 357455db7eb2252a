"""
Durable key/value storage for the admin credential record.

The record is two keys: TOKEN_KEY holds the raw bearer token and ADMIN_KEY
holds the JSON-serialized admin principal. FileStorage keeps them in a JSON
file so a restart can restore the session; MemoryStorage keeps them in a dict.

No locking is done. Two processes sharing one credentials file do not see
each other's writes until their next restore.
"""
import json
import logging
import os
import tempfile
from dataclasses import dataclass
from typing import Dict, Optional

from .exceptions import ResponseDecodeError
from .schemas import Admin

TOKEN_KEY = "adminToken"
ADMIN_KEY = "adminData"

logger = logging.getLogger(__name__)


class MemoryStorage:
    """Key/value storage that lives only as long as the process"""

    def __init__(self, initial: Optional[Dict[str, str]] = None):
        self._items: Dict[str, str] = dict(initial or {})

    def get_item(self, key: str) -> Optional[str]:
        return self._items.get(key)

    def set_item(self, key: str, value: str):
        self.set_items({key: value})

    def set_items(self, items: Dict[str, str]):
        """Store several keys as one write"""
        self._items.update(items)

    def remove_item(self, key: str):
        self.remove_items([key])

    def remove_items(self, keys):
        for key in keys:
            self._items.pop(key, None)

    def keys(self):
        return list(self._items)


class FileStorage(MemoryStorage):
    """Key/value storage persisted to a JSON file on every write"""

    def __init__(self, path: str):
        self.path = path
        super().__init__(self._load())

    def _load(self) -> Dict[str, str]:
        try:
            with open(self.path, "r", encoding="utf-8") as f:
                data = json.load(f)
        except FileNotFoundError:
            return {}
        except (OSError, ValueError) as e:
            logger.warning("Ignoring unreadable credentials file %s: %s", self.path, e)
            return {}

        if not isinstance(data, dict):
            logger.warning("Ignoring credentials file %s: top level is not an object", self.path)
            return {}
        return {str(k): v for k, v in data.items() if isinstance(v, str)}

    def _flush(self):
        directory = os.path.dirname(self.path) or "."
        os.makedirs(directory, exist_ok=True)
        # Write to a temp file and swap it in so a crash never leaves half a record
        fd, tmp_path = tempfile.mkstemp(dir=directory, prefix=".credentials-", suffix=".tmp")
        try:
            with os.fdopen(fd, "w", encoding="utf-8") as f:
                json.dump(self._items, f)
            os.replace(tmp_path, self.path)
        except BaseException:
            if os.path.exists(tmp_path):
                os.remove(tmp_path)
            raise

    def _commit(self, items: Dict[str, str]):
        # Memory and disk stay in step: a failed flush restores the old items
        previous = self._items
        self._items = items
        try:
            self._flush()
        except OSError:
            self._items = previous
            raise

    def set_items(self, items: Dict[str, str]):
        self._commit({**self._items, **items})

    def remove_items(self, keys):
        keys = [key for key in keys if key in self._items]
        if not keys:
            return
        self._commit({k: v for k, v in self._items.items() if k not in keys})


@dataclass(frozen=True)
class CredentialRecord:
    token: str
    admin: Admin


class CredentialStore:
    """Reads and writes the persisted credential record on top of a storage backend"""

    def __init__(self, storage: MemoryStorage):
        self.storage = storage

    def read(self) -> Optional[CredentialRecord]:
        """
        Return the persisted record, or None when there is none.

        A half-written or corrupt record counts as absent and is erased.
        """
        token = self.storage.get_item(TOKEN_KEY)
        admin_data = self.storage.get_item(ADMIN_KEY)
        if token is None and admin_data is None:
            return None
        if not token or admin_data is None:
            logger.warning("Discarding incomplete credential record")
            self.clear()
            return None

        try:
            admin = Admin.from_payload(json.loads(admin_data))
        except (ValueError, ResponseDecodeError) as e:
            logger.warning("Discarding corrupt credential record: %s", e)
            self.clear()
            return None
        return CredentialRecord(token=token, admin=admin)

    def read_admin(self) -> Optional[Admin]:
        record = self.read()
        return record.admin if record else None

    def write(self, token: str, admin: Admin):
        """Persist token and principal together; either both land or neither does"""
        self.storage.set_items({
            TOKEN_KEY: token,
            ADMIN_KEY: json.dumps(admin.to_payload()),
        })

    def write_admin(self, admin: Admin):
        self.storage.set_item(ADMIN_KEY, json.dumps(admin.to_payload()))

    def clear(self):
        self.storage.remove_items([TOKEN_KEY, ADMIN_KEY])

    def is_empty(self) -> bool:
        return self.storage.get_item(TOKEN_KEY) is None and self.storage.get_item(ADMIN_KEY) is None
