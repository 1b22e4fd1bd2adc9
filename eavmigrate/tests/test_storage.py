"""Tests for the record store backends."""

import pytest

from eavmigrate.errors import StorageFailure
from eavmigrate.model.records import Insert, Update
from eavmigrate.storage.csv_store import CsvRecordStore
from eavmigrate.storage.memory import InMemoryRecordStore


def make_store():
    return InMemoryRecordStore(
        {"things": [{"thing_id": 5, "name": "a"}, {"thing_id": 8, "name": "b"}]},
        primary_keys={"things": "thing_id"},
    )


def test_insert_ids_continue_after_clear():
    """Test that fresh ids never reuse an id the table held before clear()."""
    store = make_store()
    store.clear("things")
    assert store.row_count("things") == 0
    rows = store.write_rows("things", [Update(id=2, fields={"name": "c"}), Insert(fields={"name": "d"})])
    assert [row["thing_id"] for row in rows] == [2, 9]
    assert store.get_fields("things") == ["thing_id", "name"]


def test_duplicate_explicit_ids_fail():
    """Test that two rows with the same explicit id are rejected."""
    store = make_store()
    with pytest.raises(StorageFailure):
        store.write_rows("things", [Update(id=1, fields={}), Update(id=1, fields={})])


def test_tables_without_primary_key_store_fields_as_is():
    """Test writing to a table with no identifier column."""
    store = InMemoryRecordStore()
    store.write_rows("links", [Insert(fields={"attribute_id": 3, "store_id": 0})])
    assert store.get_rows("links") == [{"attribute_id": 3, "store_id": 0}]


def test_read_unknown_table_fails():
    """Test that reading a missing table raises StorageFailure."""
    with pytest.raises(StorageFailure):
        InMemoryRecordStore().get_rows("missing")


def test_memory_backup_and_rollback():
    """Test rollback restores contents and can be repeated."""
    store = make_store()
    store.rollback("things")  # never backed up: no-op
    store.backup("things")
    store.write_rows("things", [Insert(fields={"name": "z"})])
    store.rollback("things")
    store.rollback("things")
    assert store.get_rows("things") == [{"thing_id": 5, "name": "a"}, {"thing_id": 8, "name": "b"}]
    store.delete_backup("things")
    assert not store.has_backup("things")


def test_memory_rollback_of_absent_table_removes_it():
    """Test that a table created after its backup disappears on rollback."""
    store = InMemoryRecordStore()
    store.backup("new_table")
    store.write_rows("new_table", [Insert(fields={"x": 1})])
    store.rollback("new_table")
    assert not store.has_table("new_table")


def test_csv_store_reads_typed_rows(tmp_path):
    """Test that integers and empty cells come back as int and None."""
    (tmp_path / "eav_attribute.csv").write_text(
        "attribute_id,entity_type_id,attribute_code,note\n1,4,name,\n2,4,color,hello\n",
        encoding="utf-8",
    )
    store = CsvRecordStore(tmp_path, primary_keys={"eav_attribute": "attribute_id"})
    rows = store.get_rows("eav_attribute")
    assert rows[0] == {"attribute_id": 1, "entity_type_id": 4, "attribute_code": "name", "note": None}
    assert rows[1]["note"] == "hello"
    assert isinstance(rows[1]["attribute_id"], int)
    assert store.tables() == ["eav_attribute"]


def test_csv_store_write_and_bit_identical_rollback(tmp_path):
    """Test CSV backups restore the exact original bytes."""
    original = "attribute_id,attribute_code\n1,name\n2,color\n"
    path = tmp_path / "eav_attribute.csv"
    path.write_text(original, encoding="utf-8")
    store = CsvRecordStore(tmp_path, primary_keys={"eav_attribute": "attribute_id"})

    store.backup("eav_attribute")
    store.clear("eav_attribute")
    store.write_rows("eav_attribute", [Insert(fields={"attribute_code": "size"})])
    assert store.get_rows("eav_attribute") == [{"attribute_id": 3, "attribute_code": "size"}]
    assert store.tables() == ["eav_attribute"]  # backup file is not a table

    store.rollback("eav_attribute")
    assert path.read_text(encoding="utf-8") == original
    store.delete_backup("eav_attribute")
    assert not store.has_backup("eav_attribute")


def test_csv_store_backup_of_missing_table(tmp_path):
    """Test rollback removes a CSV file that did not exist at backup time."""
    store = CsvRecordStore(tmp_path)
    store.backup("eav_attribute_label")
    store.write_rows("eav_attribute_label", [Insert(fields={"attribute_id": 1, "value": "Name"})])
    assert store.has_table("eav_attribute_label")
    store.rollback("eav_attribute_label")
    assert not store.has_table("eav_attribute_label")


def test_csv_store_requires_directory(tmp_path):
    """Test that a missing directory is reported as a storage failure."""
    with pytest.raises(StorageFailure):
        CsvRecordStore(tmp_path / "nope")


def test_csv_store_keeps_text_values_on_round_trip(tmp_path):
    """Test that NA-like words and zero-padded codes survive a read and rewrite."""
    path = tmp_path / "items.csv"
    path.write_text("id,code,label,note\n1,007,N/A,\n2,abc,None,x\n", encoding="utf-8")
    store = CsvRecordStore(tmp_path, primary_keys={"items": "id"})

    rows = store.get_rows("items")
    assert rows == [
        {"id": 1, "code": "007", "label": "N/A", "note": None},
        {"id": 2, "code": "abc", "label": "None", "note": "x"},
    ]

    fields = [{k: v for k, v in row.items() if k != "id"} for row in rows]
    store.write_rows("items", [Insert(fields=f) for f in fields])
    assert path.read_text(encoding="utf-8") == "id,code,label,note\n3,007,N/A,\n4,abc,None,x\n"


def test_csv_store_integer_column_with_gaps_stays_integer(tmp_path):
    """Test that empty cells in an integer column do not turn the rest into floats."""
    path = tmp_path / "catalog_eav_attribute.csv"
    path.write_text("attribute_id,used_in_grid\n70,1\n71,\n", encoding="utf-8")
    store = CsvRecordStore(tmp_path)
    rows = store.get_rows("catalog_eav_attribute")
    assert rows == [{"attribute_id": 70, "used_in_grid": 1}, {"attribute_id": 71, "used_in_grid": None}]

    store.write_rows("catalog_eav_attribute", [Insert(fields=row) for row in rows])
    assert path.read_text(encoding="utf-8") == "attribute_id,used_in_grid\n70,1\n71,\n"


def test_csv_store_undecodable_file_is_storage_failure(tmp_path):
    """Test that a file that is not valid UTF-8 is reported as a storage failure."""
    path = tmp_path / "eav_entity_attribute.csv"
    path.write_bytes(b"entity_attribute_id,attribute_id\n1,70\n\xff\xfe,\xff\n")
    store = CsvRecordStore(tmp_path)
    with pytest.raises(StorageFailure):
        store.get_rows("eav_entity_attribute")
