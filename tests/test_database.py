import threading

import pytest

from app.core.errors import StoreError
from app.database import FileBackedDB, apply_update


def test_insert_assigns_id_and_find_one_round_trips_types(file_db):
    coll = file_db.collection("things")
    doc = {"name": "Rope", "price": 6.99, "tags": ["dog", "toy"], "meta": {"stock": 3}, "active": False}
    result = coll.insert_one(doc)
    assert len(result.inserted_id) == 32
    assert doc["_id"] == result.inserted_id

    found = coll.find_one({"_id": result.inserted_id})
    assert found == doc


def test_documents_with_different_fields_share_a_collection(file_db):
    coll = file_db.collection("things")
    coll.insert_one({"a": 1})
    coll.insert_one({"b": "x"})
    docs = coll.find()
    assert {k for k in docs[0] if k != "_id"} == {"a"}
    assert {k for k in docs[1] if k != "_id"} == {"b"}


def test_find_filters_and_sorts(file_db):
    coll = file_db.collection("things")
    coll.insert_one({"kind": "a", "created_at": "2024-01-02"})
    coll.insert_one({"kind": "b", "created_at": "2024-01-03"})
    coll.insert_one({"kind": "a", "created_at": "2024-01-01"})
    coll.insert_one({"kind": "a"})

    newest_first = coll.find({"kind": "a"}, sort=[("created_at", -1)])
    assert [d.get("created_at") for d in newest_first] == ["2024-01-02", "2024-01-01", None]


def test_update_one_reports_matched_and_modified(file_db):
    coll = file_db.collection("things")
    coll.insert_one({"key": "k", "n": 1})

    res = coll.update_one({"key": "k"}, {"$set": {"n": 1}})
    assert (res.matched_count, res.modified_count) == (1, 0)

    res = coll.update_one({"key": "k"}, {"$inc": {"n": 2}})
    assert (res.matched_count, res.modified_count) == (1, 1)
    assert coll.find_one({"key": "k"})["n"] == 3

    res = coll.update_one({"key": "missing"}, {"$set": {"n": 0}})
    assert (res.matched_count, res.modified_count) == (0, 0)


def test_update_one_only_touches_first_match(file_db):
    coll = file_db.collection("things")
    coll.insert_one({"group": "g", "n": 0})
    coll.insert_one({"group": "g", "n": 0})
    coll.update_one({"group": "g"}, {"$inc": {"n": 1}})
    assert sorted(d["n"] for d in coll.find({"group": "g"})) == [0, 1]


def test_array_operators():
    doc = {"liked_by": ["a"], "comments": []}
    doc = apply_update(doc, {"$addToSet": {"liked_by": "a"}})
    assert doc["liked_by"] == ["a"]
    doc = apply_update(doc, {"$addToSet": {"liked_by": "b"}, "$push": {"comments": {"text": "hi"}}})
    assert doc["liked_by"] == ["a", "b"]
    assert doc["comments"] == [{"text": "hi"}]
    doc = apply_update(doc, {"$pull": {"liked_by": "a"}})
    assert doc["liked_by"] == ["b"]


def test_apply_update_does_not_mutate_input_or_id():
    original = {"_id": "x", "items": [1]}
    out = apply_update(original, {"$set": {"_id": "y"}, "$push": {"items": 2}})
    assert original == {"_id": "x", "items": [1]}
    assert out == {"_id": "x", "items": [1, 2]}


def test_unsupported_operator_raises_store_error():
    with pytest.raises(StoreError):
        apply_update({}, {"$rename": {"a": "b"}})


def test_delete_one(file_db):
    coll = file_db.collection("things")
    coll.insert_one({"key": "k"})
    assert coll.delete_one({"key": "k"}).deleted_count == 1
    assert coll.delete_one({"key": "k"}).deleted_count == 0
    assert coll.find() == []


def test_empty_strings_survive(file_db):
    coll = file_db.collection("things")
    coll.insert_one({"note": "", "owner": "a,b \"quoted\""})
    doc = coll.find()[0]
    assert doc["note"] == ""
    assert doc["owner"] == 'a,b "quoted"'


def test_corrupt_file_raises_store_error(tmp_path):
    db = FileBackedDB(tmp_path)
    (tmp_path / "carts.csv").write_text("owner\nnot-json\n")
    with pytest.raises(StoreError):
        db.collection("carts").find()


def test_collection_file_names_come_from_mapping(tmp_path):
    db = FileBackedDB(tmp_path, files={"carts": "my_carts.csv"})
    db.collection("carts").insert_one({"owner": "a@example.com"})
    assert (tmp_path / "my_carts.csv").exists()
    db.collection("other").insert_one({"x": 1})
    assert (tmp_path / "other.csv").exists()


def test_upsert_inserts_once_then_updates(file_db):
    coll = file_db.collection("things")
    res = coll.update_one({"key": "k"}, {"$set": {"n": 1}}, upsert=True)
    assert (res.matched_count, res.modified_count) == (0, 0)
    assert len(res.upserted_id) == 32
    assert coll.find_one({"key": "k"}) == {"key": "k", "n": 1, "_id": res.upserted_id}

    res = coll.update_one({"key": "k"}, {"$set": {"n": 2}}, upsert=True)
    assert (res.matched_count, res.modified_count, res.upserted_id) == (1, 1, None)
    assert [d["n"] for d in coll.find()] == [2]


def test_writes_leave_no_temp_files(tmp_path):
    db = FileBackedDB(tmp_path)
    coll = db.collection("things")
    coll.insert_one({"key": "k"})
    coll.update_one({"key": "k"}, {"$set": {"n": 1}})
    coll.delete_one({"key": "k"})
    assert sorted(p.name for p in tmp_path.iterdir() if not p.name.endswith(".lock")) == ["things.csv"]


def test_reads_never_see_a_partial_file_during_writes(file_db):
    coll = file_db.collection("carts")
    for i in range(200):
        coll.insert_one({"owner": f"u{i}@example.com", "n": 0})

    stop = threading.Event()
    errors = []

    def writer():
        try:
            while not stop.is_set():
                coll.update_one({"owner": "u1@example.com"}, {"$inc": {"n": 1}})
        except Exception as exc:  # surfaced by the assertion below
            errors.append(exc)

    t = threading.Thread(target=writer)
    t.start()
    try:
        misses = sum(1 for _ in range(200) if coll.find_one({"owner": "u150@example.com"}) is None)
    finally:
        stop.set()
        t.join()

    assert errors == []
    assert misses == 0
    assert coll.find_one({"owner": "u1@example.com"})["n"] > 0
