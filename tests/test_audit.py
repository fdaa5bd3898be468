import re
from datetime import datetime, timedelta, timezone

from tablegate.audit import (
    inject_create,
    inject_create_with_meta,
    inject_update,
    inject_update_with_meta,
    now_timestamp,
)
from tablegate.types import ColumnMeta, TableMeta

TS_RE = re.compile(r"^\d{4}-\d{2}-\d{2} \d{2}:\d{2}:\d{2}$")


def _table(*names):
    return TableMeta(name="items", columns=[ColumnMeta(n) for n in names])


def test_now_timestamp_format_and_value():
    value = now_timestamp()
    assert TS_RE.match(value)
    parsed = datetime.strptime(value, "%Y-%m-%d %H:%M:%S").replace(
        tzinfo=timezone.utc
    )
    assert abs(datetime.now(timezone.utc) - parsed) < timedelta(seconds=5)


def test_inject_create_sets_all_fields():
    data = {"name": "n"}
    inject_create(data, "user-1")
    assert data["name"] == "n"
    assert data["created_by"] == "user-1"
    assert data["modified_by"] == "user-1"
    assert TS_RE.match(data["created_at"])
    assert data["created_at"] == data["updated_at"]


def test_inject_create_overwrites_supplied_values():
    data = {"created_by": "someone-else", "created_at": "old"}
    inject_create(data, "user-1")
    assert data["created_by"] == "user-1"
    assert data["created_at"] != "old"


def test_inject_update_sets_only_update_fields():
    data = {"name": "n"}
    inject_update(data, "user-2")
    assert set(data) == {"name", "updated_at", "modified_by"}
    assert data["modified_by"] == "user-2"
    assert TS_RE.match(data["updated_at"])


def test_inject_create_with_meta_respects_columns():
    data = {}
    inject_create_with_meta(data, "user-3", _table("id", "created_at", "created_by"))
    assert set(data) == {"created_at", "created_by"}
    assert data["created_by"] == "user-3"


def test_inject_create_with_meta_all_columns():
    data = {}
    meta = _table("created_at", "updated_at", "created_by", "modified_by")
    inject_create_with_meta(data, "user-3", meta)
    assert set(data) == {"created_at", "updated_at", "created_by", "modified_by"}


def test_inject_update_with_meta_respects_columns():
    data = {"x": 1}
    inject_update_with_meta(data, "user-4", _table("x", "modified_by"))
    assert data == {"x": 1, "modified_by": "user-4"}


def test_inject_update_with_meta_no_columns():
    data = {"x": 1}
    inject_update_with_meta(data, "user-4", _table("x"))
    assert data == {"x": 1}