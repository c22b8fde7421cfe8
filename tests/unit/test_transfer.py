"""
Unit tests for export / restore (labelpr/engine/transfer.py).
open_store is patched to an in-memory Store; export files live in tmp_path.
"""

import json
from contextlib import contextmanager
from unittest.mock import patch

import pytest

from labelpr.db.seed import seed_store
from labelpr.engine.transfer import export_store, import_store, read_export, store_counts
from labelpr.models import Store


@pytest.fixture
def store():
    s = seed_store()

    @contextmanager
    def fake_open_store(storage=None, readonly=False):
        yield s

    with patch('labelpr.engine.transfer.open_store', fake_open_store), \
         patch('labelpr.engine.transfer.bus.emit'):
        yield s


def test_store_counts():
    counts = store_counts(seed_store())
    assert counts == {
        'contacts': 2, 'platform_contacts': 2, 'label_artists': 1, 'tracks': 2,
        'release_plans': 1, 'links': 3, 'metrics': 4,
    }


def test_export_writes_storage_blob(store, tmp_path):
    path = tmp_path / 'out' / 'export.json'
    counts = export_store(path)
    blob = json.loads(path.read_text(encoding='utf-8'))
    assert blob == store.to_dict()
    assert counts['tracks'] == 2
    assert 'Алексей Ривера' in path.read_text(encoding='utf-8')


def test_export_then_restore_round_trip(store, tmp_path):
    path = tmp_path / 'export.json'
    export_store(path)
    original = store.to_dict()

    store.tracks.clear()
    store.contacts.clear()
    import_store(path)

    assert store.to_dict() == original


def test_restore_emits_event(store, tmp_path):
    path = tmp_path / 'export.json'
    path.write_text(json.dumps(Store().to_dict()), encoding='utf-8')
    with patch('labelpr.engine.transfer.bus.emit') as mock_emit:
        counts = import_store(path)
    assert counts['tracks'] == 0
    assert store.tracks == []
    assert mock_emit.call_args[0][0] == 'store_restored'


def test_read_export_missing_keys_are_empty(tmp_path):
    path = tmp_path / 'partial.json'
    path.write_text(json.dumps({'pr_tracks': [{'id': 't1', 'title': 'X'}]}), encoding='utf-8')
    restored = read_export(path)
    assert restored.tracks[0].title == 'X'
    assert restored.contacts == []


@pytest.mark.parametrize('content, message', [
    ('{broken', 'not valid JSON'),
    ('[1, 2]', 'JSON object'),
    ('{"pr_users": []}', 'unknown keys'),
    ('{"pr_tracks": {"t1": {}}}', 'list of objects'),
    ('{"pr_tracks": ["t1"]}', 'list of objects'),
])
def test_read_export_rejects_bad_files(tmp_path, content, message):
    path = tmp_path / 'bad.json'
    path.write_text(content, encoding='utf-8')
    with pytest.raises(ValueError, match=message):
        read_export(path)


def test_read_export_missing_file(tmp_path):
    with pytest.raises(ValueError, match='Cannot read'):
        read_export(tmp_path / 'nope.json')


def test_bad_restore_leaves_store_untouched(store, tmp_path):
    path = tmp_path / 'bad.json'
    path.write_text('{"pr_users": []}', encoding='utf-8')
    before = store.to_dict()
    with pytest.raises(ValueError):
        import_store(path)
    assert store.to_dict() == before


def test_read_export_rejects_contact_in_wrong_list(tmp_path):
    path = tmp_path / 'export.json'
    blob = {'pr_contacts': [{'id': 'x', 'name': 'Shadow Echo', 'category': 'Label Artist'}]}
    path.write_text(json.dumps(blob), encoding='utf-8')
    with pytest.raises(ValueError, match="belongs in label_artists, not contacts"):
        read_export(path)


@pytest.mark.parametrize('blob, message', [
    ({'pr_contacts': [{'id': 'k', 'category': 'Podcaster'}]}, "unknown category 'Podcaster'"),
    ({'pr_tracks': [{'id': 't', 'status': 'Leaked'}]}, "unknown status 'Leaked'"),
    ({'pr_release_plans': [{'id': 'p', 'status': 'Done'}]}, "unknown status 'Done'"),
])
def test_read_export_rejects_unknown_vocabulary(tmp_path, blob, message):
    path = tmp_path / 'export.json'
    path.write_text(json.dumps(blob), encoding='utf-8')
    with pytest.raises(ValueError, match=message):
        read_export(path)


def test_invalid_records_leave_store_untouched(store, tmp_path):
    path = tmp_path / 'export.json'
    path.write_text(json.dumps({'pr_platform_contacts': [{'id': 'b', 'category': 'Blogger'}]}),
                    encoding='utf-8')
    before = store.to_dict()
    with pytest.raises(ValueError):
        import_store(path)
    assert store.to_dict() == before


def test_read_export_null_name_becomes_empty_string(tmp_path):
    path = tmp_path / 'export.json'
    path.write_text(json.dumps({'pr_contacts': [{'id': 'c', 'name': None}]}), encoding='utf-8')
    assert read_export(path).contacts[0].name == ''
