"""Tests for JSON persistence."""

import json

import pytest

from conftest import make_business, make_edge
from relationship_mapper.exceptions import InputError, PersistenceError
from relationship_mapper.store import RelationshipStore


def test_save_and_load_round_trip(tmp_path):
    store = RelationshipStore(tmp_path / "data")
    businesses = [make_business('a', 'Alpha', website='https://a.example'), make_business('b')]
    edges = [make_edge('a', 'b', action_items=['Meet'], mutual_benefit=True)]

    store.save_businesses(businesses)
    store.save_relationships(edges)

    assert store.exists()
    assert store.load_businesses() == businesses
    assert store.load_relationships() == edges


def test_files_are_plain_json_arrays(tmp_path):
    store = RelationshipStore(tmp_path)
    store.save_relationships([make_edge('a', 'b')])

    data = json.loads((tmp_path / "relationships.json").read_text(encoding='utf-8'))
    assert isinstance(data, list)
    assert data[0]['from_id'] == 'a'
    assert data[0]['collaboration_example'] == 'No specific example provided'


def test_load_ignores_unknown_keys(tmp_path):
    (tmp_path / "businesses.json").write_text(
        json.dumps([{'id': 'a', 'name': 'Alpha', 'legacy_field': 1}]), encoding='utf-8'
    )
    assert RelationshipStore(tmp_path).load_businesses()[0].name == 'Alpha'


def test_merge_appends(tmp_path):
    store = RelationshipStore(tmp_path)
    store.save_businesses([make_business('x'), make_business('y')])
    store.save_relationships([make_edge('x', 'y')])

    businesses, edges = store.merge([make_business('z')], [make_edge('z', 'x'), make_edge('y', 'z')])

    assert [b.id for b in businesses] == ['x', 'y', 'z']
    assert len(edges) == 3
    assert [b.id for b in store.load_businesses()] == ['x', 'y', 'z']
    assert len(store.load_relationships()) == 3


def test_missing_file_is_input_error(tmp_path):
    store = RelationshipStore(tmp_path)
    assert not store.exists()
    with pytest.raises(InputError):
        store.load_businesses()


def test_corrupt_file_is_input_error(tmp_path):
    (tmp_path / "relationships.json").write_text("{not json", encoding='utf-8')
    with pytest.raises(InputError):
        RelationshipStore(tmp_path).load_relationships()


def test_unwritable_location_is_persistence_error(tmp_path):
    blocker = tmp_path / "file"
    blocker.write_text("not a directory", encoding='utf-8')

    with pytest.raises(PersistenceError):
        RelationshipStore(blocker / "data").save_businesses([make_business('a')])
