"""
Tests for LayoutStore persistence
"""
import pytest
from sqlalchemy import create_engine

from layout_service.google_helpers import DEFAULT_OWNER, DEFAULT_TAGS, create_session_factory
from layout_service.layout_store import LayoutStore, LayoutStoreError, generate_record_id

from conftest import make_part


def test_retrieve_all_empty(store):
    assert store.retrieve_all() == []


def test_store_returns_record(store, nested_document):
    item = store.store(nested_document, owner="alice", tags=["truck", "draft"])

    assert item["id"].startswith("batch-")
    assert item["owner"] == "alice"
    assert item["tags"] == ["truck", "draft"]
    assert item["payload"] == nested_document


def test_store_defaults(store):
    item = store.store([])
    assert item["owner"] == DEFAULT_OWNER
    assert item["tags"] == list(DEFAULT_TAGS)


def test_round_trip(store, nested_document):
    store.store([make_part("existing")])
    before = {item["id"] for item in store.retrieve_all()}

    item = store.store(nested_document)

    after = store.retrieve_all()
    new = [record for record in after if record["id"] not in before]
    assert len(new) == 1
    assert new[0] == item
    assert new[0]["payload"] == nested_document


def test_retrieve_all_returns_every_record(store):
    ids = {store.store([make_part(f"p{i}")])["id"] for i in range(5)}
    assert {item["id"] for item in store.retrieve_all()} == ids


def test_generated_ids_do_not_collide():
    ids = [generate_record_id() for _ in range(1000)]
    assert len(set(ids)) == len(ids)


def test_rapid_stores_do_not_collide(store):
    ids = [store.store([make_part(f"p{i}")])["id"] for i in range(1000)]
    assert len(set(ids)) == 1000
    assert len(store.retrieve_all()) == 1000


def test_store_failure_raises_store_error(broken_store):
    with pytest.raises(LayoutStoreError) as exc_info:
        broken_store.store([make_part()])
    assert "could not store layout" in str(exc_info.value)


def test_retrieve_failure_raises_store_error(broken_store):
    with pytest.raises(LayoutStoreError):
        broken_store.retrieve_all()


def test_create_tables_failure_hides_backend_detail(tmp_path):
    engine = create_engine(f"sqlite:///{tmp_path / 'no-such-dir' / 'layouts.db'}")
    store = LayoutStore(create_session_factory(engine))

    with pytest.raises(LayoutStoreError) as exc_info:
        store.create_tables()

    assert str(exc_info.value) == "OperationalError: could not create layout tables"
    engine.dispose()
