from __future__ import annotations

import json
import logging
import os
import tempfile
import threading
from pathlib import Path
from typing import Any

from dbsuspend.core.units import Unit

logger = logging.getLogger(__name__)


class JsonInventoryAdapter:
    """Inventory backed by a JSON document on disk.

    The document has the form::

        {"units": [{"name": "DB01", "host": "mx01", "storage_path": "...",
                    "size": 1073741824, "whitespace": 0, "excluded": false,
                    "exclusion_reason": null}]}
    """

    _INVENTORY_ENV = "DBSUSPEND_INVENTORY"
    _DEFAULT_FILE = "inventory.json"

    def __init__(self, path: Path | str | None = None) -> None:
        """Create an adapter for an inventory file (or the env/default path)."""
        self.path = Path(path) if path else self._default_path()
        self._lock = threading.Lock()

    def _default_path(self) -> Path:
        """Return the inventory path, honoring env override."""
        raw = os.getenv(self._INVENTORY_ENV)
        if raw:
            return Path(raw)
        xdg = os.getenv("XDG_CONFIG_HOME")
        base = Path(xdg) if xdg else Path.home() / ".config"
        return base / "dbsuspend" / self._DEFAULT_FILE

    def _load(self) -> dict[str, Any]:
        payload = json.loads(self.path.read_text(encoding="utf-8"))
        if not isinstance(payload, dict) or not isinstance(payload.get("units"), list):
            raise ValueError(f"{self.path}: expected an object with a 'units' list")
        return payload

    def _store(self, payload: dict[str, Any]) -> None:
        """Rewrite the inventory atomically."""
        self.path.parent.mkdir(parents=True, exist_ok=True)
        fd, tmp = tempfile.mkstemp(dir=self.path.parent, prefix=".inventory-")
        try:
            with os.fdopen(fd, "w", encoding="utf-8") as fh:
                json.dump(payload, fh, indent=2)
                fh.write("\n")
            os.replace(tmp, self.path)
        except BaseException:
            Path(tmp).unlink(missing_ok=True)
            raise

    def list_units(self) -> list[Unit]:
        """Return all well-formed units in the inventory."""
        with self._lock:
            payload = self._load()

        units: list[Unit] = []
        for item in payload["units"]:
            try:
                units.append(
                    Unit(
                        name=str(item["name"]),
                        host=str(item["host"]),
                        storage_path=str(item["storage_path"]),
                        # a missing size is kept as 0 so the pass can report it
                        size=int(item.get("size") or 0),
                        whitespace=int(item.get("whitespace") or 0),
                        excluded=_parse_flag(item.get("excluded", False)),
                    )
                )
            except (AttributeError, KeyError, TypeError, ValueError):
                logger.warning("Ignoring malformed inventory entry: %r", item)
                continue
        return units

    def set_excluded(self, name: str, excluded: bool, reason: str | None) -> None:
        """Persist the exclusion flag for a unit."""
        with self._lock:
            payload = self._load()
            for item in payload["units"]:
                if isinstance(item, dict) and str(item.get("name")) == name:
                    item["excluded"] = excluded
                    item["exclusion_reason"] = reason
                    break
            else:
                raise KeyError(f"Unit '{name}' not found in {self.path}")
            self._store(payload)


def _parse_flag(value: Any) -> bool:
    """Parse an exclusion flag, rejecting values that are not clearly true or false."""
    if isinstance(value, bool):
        return value
    if value is None:
        return False
    if isinstance(value, str):
        v = value.strip().lower()
        if v in {"true", "1", "yes"}:
            return True
        if v in {"false", "0", "no", ""}:
            return False
    elif isinstance(value, int) and value in (0, 1):
        return bool(value)
    raise ValueError(f"invalid exclusion flag: {value!r}")
