"""
Unit tests for Smart Import (labelpr/engine/smart_import.py).
The AI reply is mocked; records land in an in-memory Store.
"""

from contextlib import contextmanager
from unittest.mock import patch

import pytest

from labelpr.engine import records, smart_import
from labelpr.engine.smart_import import apply_import, extract_records, find_duplicate_contact
from labelpr.models import Store


AI_REPLY = {
    'contacts': [
        {'name': 'Мира Вейн', 'category': 'Label Artist', 'platform': 'Instagram', 'handle': '@miravane'},
        {'name': 'Indie Wave', 'category': 'Media', 'contactUrl': 'https://indiewave.ru'},
        {'name': 'Kate', 'category': 'Podcaster'},
    ],
    'tracks': [
        {'title': 'Glass Hearts', 'artistName': 'Мира Вейн', 'releaseDate': '2025-06-01'},
    ],
    'releasePlans': [
        {'title': 'Glass Hearts EP', 'artist': 'Мира Вейн', 'date': '2025-06-01',
         'tasks': [{'label': 'Мастеринг'}, {'completed': True}, {'label': 'Клип', 'completed': True}]},
    ],
    'quickLinks': [
        {'title': 'EPK', 'url': 'https://drive.example.com/epk'},
    ],
}


@pytest.fixture
def store():
    s = Store()

    @contextmanager
    def fake_open_store(storage=None, readonly=False):
        yield s

    with patch('labelpr.engine.records.open_store', fake_open_store), \
         patch('labelpr.engine.records.bus.emit'), \
         patch('labelpr.engine.smart_import.bus.emit'):
        yield s


# ---------------------------------------------------------------------------
# extract_records
# ---------------------------------------------------------------------------

def test_extract_passes_schema_and_model():
    with patch('labelpr.engine.smart_import.call_ai_json', return_value=AI_REPLY) as mock_ai:
        result = extract_records('text', model='claude')
    assert mock_ai.call_args.args[1] is smart_import.IMPORT_SCHEMA
    assert mock_ai.call_args.kwargs['model'] == 'claude'
    assert len(result['contacts']) == 3


def test_extract_drops_non_object_items_and_odd_keys():
    reply = {'contacts': [{'name': 'A'}, 'junk', 3], 'tracks': 'nope', 'extra': [1]}
    with patch('labelpr.engine.smart_import.call_ai_json', return_value=reply):
        result = extract_records('text')
    assert result == {'contacts': [{'name': 'A'}], 'tracks': [], 'releasePlans': [], 'quickLinks': []}


@pytest.mark.parametrize('effect', [
    RuntimeError('AI reply is not valid JSON'),
    ValueError('GEMINI_API_KEY not set in environment'),
])
def test_extract_failure_gives_empty_lists(effect):
    with patch('labelpr.engine.smart_import.call_ai_json', side_effect=effect):
        assert extract_records('text') == smart_import.empty_result()


def test_extract_non_object_reply_gives_empty_lists():
    with patch('labelpr.engine.smart_import.call_ai_json', return_value=['a']):
        assert extract_records('text') == smart_import.empty_result()


# ---------------------------------------------------------------------------
# apply_import
# ---------------------------------------------------------------------------

def test_apply_routes_contacts_by_category(store):
    counts = apply_import(AI_REPLY)
    assert [c.name for c in store.label_artists] == ['Мира Вейн']
    assert [c.name for c in store.contacts] == ['Kate', 'Indie Wave']
    assert counts['contacts'] == 3


def test_apply_unknown_category_falls_back_to_blogger(store):
    apply_import(AI_REPLY)
    kate = store.contacts[0]
    assert kate.category == 'Blogger'
    assert kate.notes == 'Импорт ИИ'
    assert kate.platform == 'Соцсеть'


def test_apply_uses_import_defaults_and_prefixes(store):
    apply_import(AI_REPLY)
    assert store.label_artists[0].id.startswith('ai-c-')
    assert store.tracks[0].id.startswith('ai-t-')
    assert store.release_plans[0].id.startswith('ai-rp-')
    assert store.links[0].id.startswith('ai-l-')
    assert store.tracks[0].status == 'In Progress'
    assert store.tracks[0].genre == 'Pop'
    assert store.links[0].icon == 'fa-link'


def test_apply_track_without_date_gets_import_date(store):
    apply_import({'tracks': [{'title': 'X', 'artistName': 'Y'}]})
    assert store.tracks[0].release_date == '2025-01-01'


def test_apply_plan_tasks_keep_only_labelled(store):
    apply_import(AI_REPLY)
    tasks = store.release_plans[0].tasks
    assert [(t.label, t.completed) for t in tasks] == [('Мастеринг', False), ('Клип', True)]


def test_apply_counts_total(store):
    counts = apply_import(AI_REPLY)
    assert counts == {'contacts': 3, 'tracks': 1, 'plans': 1, 'links': 1, 'skipped': 0, 'total': 6}


def test_apply_emits_import_complete(store):
    with patch('labelpr.engine.smart_import.bus.emit') as mock_emit:
        apply_import(AI_REPLY)
    assert mock_emit.call_args[0][0] == 'import_complete'


def test_apply_rejected_record_is_skipped(store):
    with patch('labelpr.engine.smart_import.records.create_track',
               side_effect=ValueError("Unknown track status 'Leaked'")):
        counts = apply_import({'tracks': [{'title': 'A', 'artistName': 'B'}],
                               'quickLinks': [{'title': 'EPK', 'url': 'https://x'}]})
    assert counts['tracks'] == 0
    assert counts['links'] == 1
    assert counts['skipped'] == 1
    assert counts['total'] == 1


def test_apply_empty_data_changes_nothing(store):
    counts = apply_import(smart_import.empty_result())
    assert counts['total'] == 0
    assert store == Store()


# ---------------------------------------------------------------------------
# Duplicates
# ---------------------------------------------------------------------------

def test_find_duplicate_contact_fuzzy_within_partition(store):
    apply_import({'contacts': [{'name': 'Shadow Echo', 'category': 'Label Artist'}]})
    existing = store.label_artists[0].id
    assert find_duplicate_contact('shadow echo', 'Label Artist') == existing
    assert find_duplicate_contact('Shadow  Echo', 'Label Artist') == existing
    assert find_duplicate_contact('Shadow Echo', 'Blogger') is None
    assert find_duplicate_contact('Moonlight', 'Label Artist') is None


def test_skip_duplicates(store):
    apply_import({'contacts': [{'name': 'Indie Wave', 'category': 'Media'}]})
    counts = apply_import({'contacts': [{'name': 'indie wave', 'category': 'Media'}]},
                          skip_duplicates=True)
    assert counts['skipped'] == 1
    assert counts['contacts'] == 0
    assert len(store.contacts) == 1


def test_duplicates_kept_by_default(store):
    apply_import({'contacts': [{'name': 'Indie Wave', 'category': 'Media'}]})
    apply_import({'contacts': [{'name': 'Indie Wave', 'category': 'Media'}]})
    assert len(store.contacts) == 2


# ---------------------------------------------------------------------------
# smart_import
# ---------------------------------------------------------------------------

@pytest.mark.parametrize('text', ['', '   \n'])
def test_blank_text_makes_no_ai_call(text):
    with patch('labelpr.engine.smart_import.call_ai_json') as mock_ai:
        counts = smart_import.smart_import(text)
    mock_ai.assert_not_called()
    assert counts['total'] == 0


def test_smart_import_end_to_end(store):
    with patch('labelpr.engine.smart_import.call_ai_json', return_value=AI_REPLY):
        counts = smart_import.smart_import('Мира Вейн выпускает Glass Hearts 1 июня...')
    assert counts['total'] == 6
    assert store.tracks[0].title == 'Glass Hearts'


def test_apply_non_string_ai_values_are_coerced(store):
    reply = {
        'contacts': [{'name': 2024, 'category': 'Media', 'tags': 5}],
        'tracks': [{'title': None, 'artistName': ['Мира Вейн']}],
        'releasePlans': [{'title': 'EP', 'tasks': 'Мастеринг'}],
    }
    counts = apply_import(reply)
    assert counts['total'] == 3
    assert store.contacts[0].name == '2024'
    assert store.contacts[0].tags == []
    assert store.tracks[0].title == 'Без названия'
    assert store.tracks[0].artist_name == "['Мира Вейн']"
    assert len(store.release_plans[0].tasks) == 3
    assert [c.name for c in records.search_contacts(search='20')] == ['2024']
