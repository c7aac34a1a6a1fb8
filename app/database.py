# app/database.py
"""
File-backed document store. Every collection lives in one CSV file inside
DATA_DIR; each cell holds the JSON encoding of one top-level document field,
so nested lists/dicts and numbers keep their types across a read/write.

The API mirrors the subset of a document database the services need:
find_one / find / insert_one / update_one / delete_one over simple filter and
update operator documents. Every operation holds a per-file lock, writes
hold it across the whole read-modify-write, and the file is replaced
atomically (temp file + os.replace), so each single-document operation is
atomic and a reader never sees a half-written collection.

Usage:
    db = FileBackedDB(Path("data"))
    carts = db.collection("carts")
    carts.insert_one({"owner": "a@b.c", "items": []})
    carts.update_one({"owner": "a@b.c"}, {"$set": {"totalPrice": 0}})
"""

import copy
import json
import logging
import os
import tempfile
import uuid
from dataclasses import dataclass, asdict
from pathlib import Path
from typing import Any, Dict, Iterable, List, Optional, Protocol, Sequence, Tuple

import pandas as pd
from filelock import FileLock

from app.config import settings
from app.core.errors import StoreError

logger = logging.getLogger(__name__)

Document = Dict[str, Any]
SortSpec = Sequence[Tuple[str, int]]

ID_FIELD = "_id"


@dataclass
class InsertOneResult:
    inserted_id: str
    acknowledged: bool = True

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)


@dataclass
class UpdateResult:
    matched_count: int
    modified_count: int
    upserted_id: Optional[str] = None
    acknowledged: bool = True

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)


@dataclass
class DeleteResult:
    deleted_count: int
    acknowledged: bool = True

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)


class DocumentCollection(Protocol):
    """The storage interface the services depend on."""

    def find_one(self, filter: Document) -> Optional[Document]: ...

    def find(self, filter: Optional[Document] = None, sort: Optional[SortSpec] = None) -> List[Document]: ...

    def insert_one(self, document: Document) -> InsertOneResult: ...

    def update_one(self, filter: Document, update: Document, upsert: bool = False) -> UpdateResult: ...

    def delete_one(self, filter: Document) -> DeleteResult: ...


def matches(document: Document, filter: Optional[Document]) -> bool:
    """Top-level equality match; an empty or missing filter matches everything."""
    if not filter:
        return True
    return all(k in document and document[k] == v for k, v in filter.items())


def apply_update(document: Document, update: Document) -> Document:
    """
    Return a copy of `document` with the update operators applied.
    Supported: $set, $inc, $push, $pull, $addToSet (top-level fields only).
    """
    out = copy.deepcopy(document)
    for op, fields in update.items():
        if not isinstance(fields, dict):
            raise StoreError(f"Update operator {op} expects a mapping")
        for key, value in fields.items():
            if key == ID_FIELD:
                continue
            if op == "$set":
                out[key] = copy.deepcopy(value)
            elif op == "$inc":
                out[key] = (out.get(key) or 0) + value
            elif op == "$push":
                out[key] = list(out.get(key) or []) + [copy.deepcopy(value)]
            elif op == "$pull":
                out[key] = [v for v in (out.get(key) or []) if v != value]
            elif op == "$addToSet":
                current = list(out.get(key) or [])
                if value not in current:
                    current.append(copy.deepcopy(value))
                out[key] = current
            else:
                raise StoreError(f"Unsupported update operator: {op}")
    return out


class FileBackedDB:
    """
    Manages the collection files inside data_dir.
    Collection name maps to a file name through settings, else `<name>.csv`.
    """

    def __init__(self, data_dir: Optional[Path] = None, files: Optional[Dict[str, str]] = None):
        self.data_dir = Path(data_dir if data_dir is not None else settings.DATA_DIR)
        self.files = dict(files if files is not None else settings.collection_files())

    def collection(self, name: str) -> "FileBackedCollection":
        return FileBackedCollection(self, name)

    def _file_path(self, name: str) -> Path:
        filename = self.files.get(name, f"{name}.csv")
        return self.data_dir / Path(filename)

    def _lock_for(self, path: Path) -> FileLock:
        return FileLock(str(path) + ".lock")

    def _read_documents(self, name: str) -> List[Document]:
        path = self._file_path(name)
        if not path.exists() or path.stat().st_size == 0:
            return []
        try:
            df = pd.read_csv(path, dtype=str, keep_default_na=False)
        except (OSError, ValueError) as exc:
            logger.exception("Failed to read collection %s from %s", name, path)
            raise StoreError(f"Failed to read collection {name}") from exc
        docs = []
        for row in df.to_dict(orient="records"):
            try:
                # an empty cell means the field is absent from that document
                docs.append({k: json.loads(v) for k, v in row.items() if v != ""})
            except ValueError as exc:
                raise StoreError(f"Corrupt document in collection {name}") from exc
        return docs

    def _write_documents_nolock(self, name: str, docs: Iterable[Document]) -> None:
        """
        Write all documents of a collection WITHOUT acquiring the file lock.
        Use this only when the caller already holds the lock.
        """
        path = self._file_path(name)
        docs = list(docs)
        columns: List[str] = []
        for doc in docs:
            for k in doc:
                if k not in columns:
                    columns.append(k)
        rows = [{k: (json.dumps(doc[k], ensure_ascii=False, default=str) if k in doc else "") for k in columns}
                for doc in docs]
        tmp_path = None
        try:
            path.parent.mkdir(parents=True, exist_ok=True)
            # write next to the target so the rename stays on one filesystem
            with tempfile.NamedTemporaryFile(
                "w", dir=path.parent, prefix=f".{path.name}.", suffix=".tmp",
                delete=False, encoding="utf-8", newline="",
            ) as tmp:
                tmp_path = tmp.name
                if columns:
                    pd.DataFrame(rows, columns=columns).to_csv(tmp, index=False)
            os.replace(tmp_path, path)
        except OSError as exc:
            logger.exception("Failed to write collection %s to %s", name, path)
            if tmp_path and os.path.exists(tmp_path):
                os.remove(tmp_path)
            raise StoreError(f"Failed to write collection {name}") from exc

    def _locked(self, name: str) -> FileLock:
        path = self._file_path(name)
        path.parent.mkdir(parents=True, exist_ok=True)
        return self._lock_for(path)


class FileBackedCollection:
    """One named collection of a FileBackedDB."""

    def __init__(self, db: FileBackedDB, name: str):
        self.db = db
        self.name = name

    def _snapshot(self) -> List[Document]:
        with self.db._locked(self.name):
            return self.db._read_documents(self.name)

    def find_one(self, filter: Document) -> Optional[Document]:
        for doc in self._snapshot():
            if matches(doc, filter):
                return doc
        return None

    def find(self, filter: Optional[Document] = None, sort: Optional[SortSpec] = None) -> List[Document]:
        docs = [d for d in self._snapshot() if matches(d, filter)]
        # apply sort keys last-to-first so the first key dominates
        for key, direction in reversed(list(sort or [])):
            present = [d for d in docs if d.get(key) is not None]
            absent = [d for d in docs if d.get(key) is None]
            present.sort(key=lambda d: d[key], reverse=direction < 0)
            docs = present + absent
        return docs

    def insert_one(self, document: Document) -> InsertOneResult:
        doc = copy.deepcopy(document)
        if not doc.get(ID_FIELD):
            doc[ID_FIELD] = uuid.uuid4().hex
        with self.db._locked(self.name):
            docs = self.db._read_documents(self.name)
            docs.append(doc)
            self.db._write_documents_nolock(self.name, docs)
        # reflect the assigned id on the caller's document, like a driver does
        document[ID_FIELD] = doc[ID_FIELD]
        return InsertOneResult(inserted_id=doc[ID_FIELD])

    def update_one(self, filter: Document, update: Document, upsert: bool = False) -> UpdateResult:
        """
        Apply `update` to the first document matching `filter`.
        With upsert=True and no match, insert the filter's fields with the
        update applied; the lookup and the insert happen under one lock.
        """
        with self.db._locked(self.name):
            docs = self.db._read_documents(self.name)
            for idx, doc in enumerate(docs):
                if not matches(doc, filter):
                    continue
                updated = apply_update(doc, update)
                if updated == doc:
                    return UpdateResult(matched_count=1, modified_count=0)
                docs[idx] = updated
                self.db._write_documents_nolock(self.name, docs)
                return UpdateResult(matched_count=1, modified_count=1)
            if not upsert:
                return UpdateResult(matched_count=0, modified_count=0)
            doc = apply_update(dict(filter or {}), update)
            doc[ID_FIELD] = (filter or {}).get(ID_FIELD) or uuid.uuid4().hex
            docs.append(doc)
            self.db._write_documents_nolock(self.name, docs)
        return UpdateResult(matched_count=0, modified_count=0, upserted_id=doc[ID_FIELD])

    def delete_one(self, filter: Document) -> DeleteResult:
        with self.db._locked(self.name):
            docs = self.db._read_documents(self.name)
            for idx, doc in enumerate(docs):
                if matches(doc, filter):
                    docs.pop(idx)
                    self.db._write_documents_nolock(self.name, docs)
                    return DeleteResult(deleted_count=1)
        return DeleteResult(deleted_count=0)
