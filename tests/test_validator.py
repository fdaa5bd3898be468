from tablegate.types import ColumnMeta, JsonType, SqlType, TableMeta
from tablegate.validator import (
    ValidationIssue,
    errors_to_json,
    validate_create,
    validate_update,
)


def _meta():
    return TableMeta(
        name="users",
        columns=[
            ColumnMeta(
                name="id",
                raw_type="int",
                sql_type=SqlType.INTEGER,
                json_type=JsonType.NUMBER,
                is_nullable=False,
                is_primary_key=True,
                is_auto_increment=True,
            ),
            ColumnMeta(
                name="email",
                raw_type="varchar",
                sql_type=SqlType.STRING,
                json_type=JsonType.STRING,
                is_nullable=False,
                max_length=5,
            ),
            ColumnMeta(
                name="age",
                raw_type="int",
                sql_type=SqlType.INTEGER,
                json_type=JsonType.NUMBER,
            ),
            ColumnMeta(
                name="active",
                raw_type="bool",
                sql_type=SqlType.BOOLEAN,
                json_type=JsonType.BOOLEAN,
                is_nullable=False,
                default_value="true",
            ),
            ColumnMeta(
                name="created_at",
                raw_type="timestamp",
                sql_type=SqlType.DATETIME,
                is_nullable=False,
            ),
        ],
        primary_keys=["id"],
    )


def _codes(issues):
    return [(i.field, i.code) for i in issues]


def test_create_valid_body():
    assert validate_create({"email": "a@x", "age": 3}, _meta()) == []


def test_create_missing_required():
    issues = validate_create({}, _meta())
    assert _codes(issues) == [("email", "REQUIRED")]
    assert issues[0].message == "Field 'email' is required"


def test_create_null_required():
    assert _codes(validate_create({"email": None}, _meta())) == [("email", "REQUIRED")]


def test_create_auto_fields_skipped():
    # created_at is non-nullable without default but is an auto field
    assert validate_create({"email": "a"}, _meta()) == []


def test_create_custom_auto_fields_checks_created_at():
    issues = validate_create({"email": "a"}, _meta(), auto_fields=[])
    assert ("created_at", "REQUIRED") in _codes(issues)


def test_create_invalid_type_and_too_long():
    issues = validate_create({"email": 123, "age": "x"}, _meta())
    assert _codes(issues) == [("email", "INVALID_TYPE"), ("age", "INVALID_TYPE")]
    issues = validate_create({"email": "abcdefg"}, _meta())
    assert _codes(issues) == [("email", "TOO_LONG")]


def test_bool_is_not_number():
    issues = validate_create({"email": "a", "age": True}, _meta())
    assert _codes(issues) == [("age", "INVALID_TYPE")]


def test_length_counts_bytes():
    # five characters, ten bytes in UTF-8
    issues = validate_create({"email": "ééééé"}, _meta())
    assert _codes(issues) == [("email", "TOO_LONG")]


def test_create_unknown_fields_sorted():
    issues = validate_create({"email": "a", "zz": 1, "bb": 2}, _meta())
    assert _codes(issues) == [("bb", "UNKNOWN_FIELD"), ("zz", "UNKNOWN_FIELD")]


def test_update_rules():
    issues = validate_update(
        {"id": 5, "nope": 1, "email": None, "age": "x", "active": True}, _meta()
    )
    assert _codes(issues) == [
        ("age", "INVALID_TYPE"),
        ("id", "IMMUTABLE"),
        ("nope", "UNKNOWN_FIELD"),
    ]


def test_update_empty_body():
    assert validate_update({}, _meta()) == []


def test_errors_to_json_round_trip():
    issues = validate_create({"zz": 1}, _meta())
    payload = errors_to_json(issues)
    assert [ValidationIssue(**item) for item in payload] == issues
    assert set(payload[0]) == {"field", "code", "message"}