"""
Unit tests for the AI client (labelpr/engine/ai_client.py).
All HTTP and SDK calls are mocked — no network.
"""

from unittest.mock import MagicMock, patch

import pytest
import requests

from labelpr.engine import ai_client
from labelpr.engine.ai_client import (
    call_ai, call_ai_json, call_claude, call_deepseek, call_gemini, parse_json_reply,
)


def _gemini_response(text):
    resp = MagicMock()
    resp.json.return_value = {'candidates': [{'content': {'parts': [{'text': text}]}}]}
    return resp


@pytest.fixture
def keys():
    cfg = ai_client.config
    with patch.object(cfg, 'GEMINI_API_KEY', 'g-key'), \
         patch.object(cfg, 'ANTHROPIC_API_KEY', 'a-key'), \
         patch.object(cfg, 'DEEPSEEK_API_KEY', 'd-key'), \
         patch.object(cfg, 'DEFAULT_AI_MODEL', 'gemini-flash'):
        yield cfg


# ---------------------------------------------------------------------------
# Gemini
# ---------------------------------------------------------------------------

def test_gemini_missing_key_raises_value_error():
    with patch.object(ai_client.config, 'GEMINI_API_KEY', ''):
        with pytest.raises(ValueError, match='GEMINI_API_KEY'):
            call_gemini('hi')


def test_gemini_returns_joined_parts(keys):
    resp = MagicMock()
    resp.json.return_value = {'candidates': [{'content': {'parts': [{'text': 'При'}, {'text': 'вет'}]}}]}
    with patch('labelpr.engine.ai_client.requests.post', return_value=resp):
        assert call_gemini('hi') == 'Привет'


def test_gemini_request_shape(keys):
    with patch('labelpr.engine.ai_client.requests.post', return_value=_gemini_response('ok')) as mock_post:
        call_gemini('prompt text', system='be brief', max_tokens=800)
    url = mock_post.call_args.args[0]
    payload = mock_post.call_args.kwargs['json']
    assert url.endswith(f"/models/{keys.GEMINI_MODEL}:generateContent")
    assert mock_post.call_args.kwargs['headers']['x-goog-api-key'] == 'g-key'
    assert payload['contents'][0]['parts'][0]['text'] == 'prompt text'
    assert payload['systemInstruction'] == {'parts': [{'text': 'be brief'}]}
    assert payload['generationConfig'] == {'maxOutputTokens': 800}


def test_gemini_schema_requests_json(keys):
    schema = {'type': 'OBJECT'}
    with patch('labelpr.engine.ai_client.requests.post', return_value=_gemini_response('{}')) as mock_post:
        call_gemini('x', response_schema=schema)
    gen = mock_post.call_args.kwargs['json']['generationConfig']
    assert gen['responseMimeType'] == 'application/json'
    assert gen['responseSchema'] is schema


def test_gemini_network_error_becomes_runtime_error(keys):
    with patch('labelpr.engine.ai_client.requests.post',
               side_effect=requests.exceptions.Timeout('slow')):
        with pytest.raises(RuntimeError, match='Gemini'):
            call_gemini('x')


def test_gemini_blocked_reply_becomes_runtime_error(keys):
    resp = MagicMock()
    resp.json.return_value = {'promptFeedback': {'blockReason': 'SAFETY'}}
    with patch('labelpr.engine.ai_client.requests.post', return_value=resp):
        with pytest.raises(RuntimeError, match='Unexpected Gemini response'):
            call_gemini('x')


# ---------------------------------------------------------------------------
# Claude / DeepSeek
# ---------------------------------------------------------------------------

def test_claude_missing_key_raises_value_error():
    with patch.object(ai_client.config, 'ANTHROPIC_API_KEY', ''):
        with pytest.raises(ValueError, match='ANTHROPIC_API_KEY'):
            call_claude('hi')


def test_claude_returns_text(keys):
    message = MagicMock()
    message.content = [MagicMock(text='Здравствуйте!')]
    with patch('labelpr.engine.ai_client.Anthropic') as mock_cls:
        mock_cls.return_value.messages.create.return_value = message
        assert call_claude('hi', system='sys') == 'Здравствуйте!'
    assert mock_cls.return_value.messages.create.call_args.kwargs['system'] == 'sys'


def test_claude_sdk_error_becomes_runtime_error(keys):
    with patch('labelpr.engine.ai_client.Anthropic') as mock_cls:
        mock_cls.return_value.messages.create.side_effect = Exception('overloaded')
        with pytest.raises(RuntimeError, match='Claude'):
            call_claude('hi')


def test_deepseek_returns_message_content(keys):
    resp = MagicMock()
    resp.json.return_value = {'choices': [{'message': {'content': 'ok'}}]}
    with patch('labelpr.engine.ai_client.requests.post', return_value=resp) as mock_post:
        assert call_deepseek('hi', system='sys') == 'ok'
    messages = mock_post.call_args.kwargs['json']['messages']
    assert messages[0] == {'role': 'system', 'content': 'sys'}


# ---------------------------------------------------------------------------
# Routing
# ---------------------------------------------------------------------------

@pytest.mark.parametrize('model, target', [
    ('gemini-flash', 'call_gemini'),
    ('claude', 'call_claude'),
    ('deepseek-chat', 'call_deepseek'),
])
def test_call_ai_routes_by_model(keys, model, target):
    with patch(f'labelpr.engine.ai_client.{target}', return_value='reply') as mock_fn:
        assert call_ai('hi', model=model) == 'reply'
    mock_fn.assert_called_once()


def test_call_ai_uses_default_model(keys):
    with patch('labelpr.engine.ai_client.call_gemini', return_value='r') as mock_fn:
        call_ai('hi')
    mock_fn.assert_called_once()


def test_call_ai_unknown_model():
    with pytest.raises(ValueError, match='Unknown AI model'):
        call_ai('hi', model='gpt-2')


# ---------------------------------------------------------------------------
# JSON replies
# ---------------------------------------------------------------------------

@pytest.mark.parametrize('text, expected', [
    ('{"a": 1}', {'a': 1}),
    ('```json\n{"a": 1}\n```', {'a': 1}),
    ('```\n[1, 2]\n```', [1, 2]),
    ('', {}),
])
def test_parse_json_reply(text, expected):
    assert parse_json_reply(text) == expected


def test_parse_json_reply_invalid():
    with pytest.raises(RuntimeError, match='not valid JSON'):
        parse_json_reply('Sorry, I cannot help with that.')


def test_call_ai_json_gemini_uses_native_schema(keys):
    schema = {'type': 'OBJECT'}
    with patch('labelpr.engine.ai_client.call_gemini', return_value='{"tracks": []}') as mock_fn:
        assert call_ai_json('x', schema) == {'tracks': []}
    assert mock_fn.call_args.kwargs['response_schema'] is schema


@pytest.mark.parametrize('model, target', [('claude', 'call_claude'), ('deepseek-chat', 'call_deepseek')])
def test_call_ai_json_passes_schema_to_backend(keys, model, target):
    schema = {'type': 'OBJECT'}
    with patch(f'labelpr.engine.ai_client.{target}', return_value='{"ok": true}') as mock_fn:
        assert call_ai_json('extract', schema, model=model) == {'ok': True}
    assert mock_fn.call_args.args[0] == 'extract'
    assert mock_fn.call_args.kwargs['response_schema'] is schema


def test_call_ai_json_unknown_model(keys):
    with pytest.raises(ValueError, match='Unknown AI model'):
        call_ai_json('x', {'type': 'OBJECT'}, model='gpt-2')


# ---------------------------------------------------------------------------
# Structured output per backend
# ---------------------------------------------------------------------------

IMPORT_LIKE_SCHEMA = {
    'type': 'OBJECT',
    'properties': {
        'contacts': {'type': 'ARRAY', 'items': {
            'type': 'OBJECT',
            'properties': {'category': {'type': 'STRING', 'enum': ['Blogger', 'Label Artist']}},
        }},
    },
}


def test_to_json_schema_lowercases_types_only():
    converted = ai_client.to_json_schema(IMPORT_LIKE_SCHEMA)
    item = converted['properties']['contacts']['items']
    assert converted['type'] == 'object'
    assert item['properties']['category'] == {'type': 'string', 'enum': ['Blogger', 'Label Artist']}


def test_claude_schema_forces_tool_call(keys):
    block = MagicMock(type='tool_use', input={'contacts': [{'name': 'Мира'}]})
    message = MagicMock(content=[block])
    with patch('labelpr.engine.ai_client.Anthropic') as mock_cls:
        mock_cls.return_value.messages.create.return_value = message
        text = call_claude('extract', response_schema=IMPORT_LIKE_SCHEMA)
    kwargs = mock_cls.return_value.messages.create.call_args.kwargs
    assert kwargs['tool_choice'] == {'type': 'tool', 'name': ai_client.CLAUDE_JSON_TOOL}
    assert kwargs['tools'][0]['input_schema']['type'] == 'object'
    assert parse_json_reply(text) == {'contacts': [{'name': 'Мира'}]}


def test_claude_schema_without_tool_call_raises(keys):
    message = MagicMock(content=[MagicMock(type='text', text='Не могу.')], stop_reason='end_turn')
    with patch('labelpr.engine.ai_client.Anthropic') as mock_cls:
        mock_cls.return_value.messages.create.return_value = message
        with pytest.raises(RuntimeError, match='structured output'):
            call_claude('extract', response_schema=IMPORT_LIKE_SCHEMA)


def test_claude_plain_call_sends_no_tools(keys):
    message = MagicMock(content=[MagicMock(text='ok')])
    with patch('labelpr.engine.ai_client.Anthropic') as mock_cls:
        mock_cls.return_value.messages.create.return_value = message
        call_claude('hi')
    kwargs = mock_cls.return_value.messages.create.call_args.kwargs
    assert 'tools' not in kwargs
    assert kwargs['system'] == ai_client.CLAUDE_SYSTEM


def test_deepseek_schema_switches_on_json_mode(keys):
    resp = MagicMock()
    resp.json.return_value = {'choices': [{'message': {'content': '{"contacts": []}'}}]}
    with patch('labelpr.engine.ai_client.requests.post', return_value=resp) as mock_post:
        assert call_deepseek('extract', response_schema=IMPORT_LIKE_SCHEMA) == '{"contacts": []}'
    payload = mock_post.call_args.kwargs['json']
    assert payload['response_format'] == {'type': 'json_object'}
    system = payload['messages'][0]
    assert system['role'] == 'system'
    assert 'JSON' in system['content']
    assert '"object"' in system['content']
    assert payload['messages'][1] == {'role': 'user', 'content': 'extract'}


def test_deepseek_plain_call_has_no_response_format(keys):
    resp = MagicMock()
    resp.json.return_value = {'choices': [{'message': {'content': 'ok'}}]}
    with patch('labelpr.engine.ai_client.requests.post', return_value=resp) as mock_post:
        call_deepseek('hi')
    payload = mock_post.call_args.kwargs['json']
    assert 'response_format' not in payload
    assert payload['messages'] == [{'role': 'user', 'content': 'hi'}]


def test_deepseek_missing_choices_becomes_runtime_error(keys):
    resp = MagicMock()
    resp.json.return_value = {'error': 'x'}
    with patch('labelpr.engine.ai_client.requests.post', return_value=resp):
        with pytest.raises(RuntimeError, match='Unexpected DeepSeek response'):
            call_deepseek('hi')
