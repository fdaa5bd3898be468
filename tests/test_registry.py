import threading

from tablegate.registry import ModelRegistry, default_registry
from tablegate.types import ColumnMeta, TableMeta


def _table(name, ncols):
    return TableMeta(name=name, columns=[ColumnMeta(name=f"c{i}") for i in range(ncols)])


def test_register_and_get():
    reg = ModelRegistry()
    meta = _table("users", 2)
    reg.register_table("users", meta)
    assert reg.get_table("users") is meta
    assert reg.get_table("missing") is None


def test_table_names_sorted():
    reg = ModelRegistry()
    for name in ("zeta", "alpha", "mid"):
        reg.register_table(name, _table(name, 1))
    assert reg.table_names() == ["alpha", "mid", "zeta"]


def test_counts():
    reg = ModelRegistry()
    reg.register_table("a", _table("a", 2))
    reg.register_table("b", _table("b", 3))
    assert reg.table_count() == 2
    assert reg.total_column_count() == 5


def test_register_replaces():
    reg = ModelRegistry()
    reg.register_table("a", _table("a", 2))
    reg.register_table("a", _table("a", 4))
    assert reg.table_count() == 1
    assert reg.total_column_count() == 4


def test_clear():
    reg = ModelRegistry()
    reg.register_table("a", _table("a", 1))
    reg.clear()
    assert reg.table_count() == 0
    assert reg.table_names() == []


def test_default_registry_is_shared():
    meta = _table("singleton_probe", 3)
    default_registry().register_table("singleton_probe", meta)
    try:
        assert default_registry().get_table("singleton_probe") is meta
        assert "singleton_probe" in default_registry().table_names()
    finally:
        default_registry().clear()
    assert default_registry().get_table("singleton_probe") is None


def test_concurrent_registration():
    reg = ModelRegistry()

    def worker(offset):
        for i in range(50):
            name = f"t{offset}_{i}"
            reg.register_table(name, _table(name, 1))

    threads = [threading.Thread(target=worker, args=(n,)) for n in range(4)]
    for t in threads:
        t.start()
    for t in threads:
        t.join()
    assert reg.table_count() == 200
    assert reg.total_column_count() == 200