"""
Flat-file record store.

One JSON file per collection (products, orders, users) holding the full
array of records. Callers work on whole collections: load everything,
mutate in memory, save everything back. There is no locking between
concurrent saves of the same collection; the last writer wins.
"""
import json
import os
import re
import tempfile
import time
from pathlib import Path
from typing import Any, Dict, List, Union

from errors import StorageReadError, StorageWriteError
from logger import get_logger

log = get_logger("database")

Record = Dict[str, Any]

COLLECTIONS = ("products", "orders", "users")

_NAME_RE = re.compile(r"^[a-z][a-z0-9_]*$")


class RecordStore:
    def __init__(self, data_dir: Union[str, Path]):
        self.data_dir = Path(data_dir)

    def path_for(self, collection: str) -> Path:
        if not _NAME_RE.match(collection):
            raise ValueError(f"Invalid collection name: {collection!r}")
        return self.data_dir / f"{collection}.json"

    def load(self, collection: str, strict: bool = False) -> List[Record]:
        """Read the whole collection.

        A missing file is created as an empty collection. A corrupt or
        unreadable file is logged and read as empty, unless ``strict`` is
        set, in which case StorageReadError is raised instead.
        """
        path = self.path_for(collection)
        if not path.exists():
            if not self.save(collection, []):
                log.warning(f"Could not create empty collection file {path}")
            return []
        try:
            with open(path, "r", encoding="utf-8") as f:
                data = json.load(f)
            if not isinstance(data, list):
                raise ValueError("collection root is not an array")
        except (OSError, ValueError) as e:
            err = StorageReadError(collection, str(e))
            log.error(err.message)
            if strict:
                raise err from e
            return []
        return data

    def save(self, collection: str, records: List[Record]) -> bool:
        """Replace the whole collection. Returns False on I/O failure."""
        path = self.path_for(collection)
        tmp_name = None
        try:
            path.parent.mkdir(parents=True, exist_ok=True)
            payload = json.dumps(list(records), indent=2, ensure_ascii=False)
            fd, tmp_name = tempfile.mkstemp(prefix=f".{collection}.", suffix=".tmp", dir=path.parent)
            with os.fdopen(fd, "w", encoding="utf-8") as f:
                f.write(payload)
            os.replace(tmp_name, path)
            tmp_name = None
        except (OSError, TypeError, ValueError) as e:
            log.error(StorageWriteError(collection, str(e)).message)
            return False
        finally:
            if tmp_name and os.path.exists(tmp_name):
                os.unlink(tmp_name)
        return True

    def save_or_raise(self, collection: str, records: List[Record]) -> None:
        if not self.save(collection, records):
            raise StorageWriteError(collection, "write failed")


def next_id(records: List[Record]) -> int:
    """Time-derived id that is always above every id already in ``records``."""
    now_ms = int(time.time() * 1000)
    ids = [r["id"] for r in records if isinstance(r.get("id"), int) and not isinstance(r.get("id"), bool)]
    return max([now_ms] + [i + 1 for i in ids])


def find_index(records: List[Record], record_id: Any) -> int:
    for i, r in enumerate(records):
        if r.get("id") == record_id:
            return i
    return -1
