import json

import pytest

from conftest import make_unit
from dbsuspend.core.adapters.jsoninventory import JsonInventoryAdapter
from dbsuspend.core.inventory import CatalogError, list_units


class _Inventory:
    def __init__(self, units=None, error: Exception | None = None):
        self.units = units or []
        self.error = error

    def list_units(self):
        if self.error:
            raise self.error
        return list(self.units)

    def set_excluded(self, name, excluded, reason):
        raise AssertionError("not expected")


def test_list_units_sorts_by_name_and_drops_excluded_names():
    adapter = _Inventory([make_unit("DB03"), make_unit("DB01"), make_unit("DB02")])

    units = list_units(adapter, exclude_names=["db02"])

    assert [u.name for u in units] == ["DB01", "DB03"]


def test_list_units_wraps_inventory_errors():
    adapter = _Inventory(error=OSError("inventory unreachable"))

    with pytest.raises(CatalogError, match="inventory unreachable"):
        list_units(adapter)


def _write_inventory(path, units):
    path.write_text(json.dumps({"units": units}), encoding="utf-8")


def test_json_inventory_lists_units_and_skips_malformed_entries(tmp_path):
    path = tmp_path / "inventory.json"
    _write_inventory(
        path,
        [
            {
                "name": "DB01",
                "host": "mx01",
                "storage_path": "/data/DB01.edb",
                "size": 1024,
                "whitespace": 10,
                "excluded": True,
            },
            {"name": "DB02", "host": "mx02", "storage_path": "/data/DB02.edb"},
            {"name": "broken"},
        ],
    )

    units = JsonInventoryAdapter(path).list_units()

    assert [u.name for u in units] == ["DB01", "DB02"]
    assert units[0].excluded is True
    assert units[0].whitespace == 10
    assert units[1].size == 0
    assert units[1].excluded is False


def test_json_inventory_set_excluded_persists_flag_and_reason(tmp_path):
    path = tmp_path / "inventory.json"
    _write_inventory(
        path,
        [{"name": "DB01", "host": "mx01", "storage_path": "/d", "size": 1}],
    )
    adapter = JsonInventoryAdapter(path)

    adapter.set_excluded("DB01", True, "low space")

    stored = json.loads(path.read_text(encoding="utf-8"))["units"][0]
    assert stored["excluded"] is True
    assert stored["exclusion_reason"] == "low space"
    assert adapter.list_units()[0].excluded is True


def test_json_inventory_set_excluded_unknown_unit(tmp_path):
    path = tmp_path / "inventory.json"
    _write_inventory(path, [])

    with pytest.raises(KeyError):
        JsonInventoryAdapter(path).set_excluded("DB09", True, None)


def test_json_inventory_missing_file_is_a_catalog_error(tmp_path):
    adapter = JsonInventoryAdapter(tmp_path / "missing.json")

    with pytest.raises(CatalogError):
        list_units(adapter)


def test_json_inventory_default_path_honors_env(monkeypatch, tmp_path):
    monkeypatch.setenv("DBSUSPEND_INVENTORY", str(tmp_path / "inv.json"))

    assert JsonInventoryAdapter().path == tmp_path / "inv.json"


def test_json_inventory_parses_string_flags_strictly(tmp_path):
    path = tmp_path / "inventory.json"
    base = {"host": "mx01", "storage_path": "/d", "size": 1}
    _write_inventory(
        path,
        [
            {"name": "DB01", "excluded": "false", **base},
            {"name": "DB02", "excluded": "True", **base},
            {"name": "DB03", "excluded": "maybe", **base},
        ],
    )

    units = JsonInventoryAdapter(path).list_units()

    assert [(u.name, u.excluded) for u in units] == [("DB01", False), ("DB02", True)]


def test_json_inventory_writes_back_numeric_names(tmp_path):
    path = tmp_path / "inventory.json"
    _write_inventory(path, [{"name": 1001, "host": "mx01", "storage_path": "/d", "size": 1}])
    adapter = JsonInventoryAdapter(path)
    unit = adapter.list_units()[0]

    adapter.set_excluded(unit.name, True, None)

    assert unit.name == "1001"
    assert json.loads(path.read_text(encoding="utf-8"))["units"][0]["excluded"] is True
