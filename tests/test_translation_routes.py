"""
Integration tests for translation routes (POST /translation/json, POST /translation/text,
GET /api/languages).

The Flask app is created with an in-memory translation service so no
external API is called.
"""

import sys
import os
import json
import pytest

# Add parent directory to path for imports
sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

from app import create_app
from tests.fakes import FakeTranslationService


@pytest.fixture
def service():
    return FakeTranslationService(
        dictionaries={"DE": {"Hello": "Hallo", "Good morning": "Guten Morgen"}},
        failing={"FR"}
    )


@pytest.fixture
def client(service, tmp_path):
    """Create a test client backed by the fake translation service"""
    app = create_app('testing', translation_service=service)
    app.config['OUTPUT_FOLDER'] = str(tmp_path / 'translations')

    with app.test_client() as client:
        yield client


@pytest.fixture
def payload():
    return {
        "document": {"message": "Hello", "nested": {"greeting": "Good morning"}, "version": 2},
        "source_language": "EN",
        "target_languages": ["DE", "FR"]
    }


def test_translate_json_partial_success(client, payload):
    response = client.post('/translation/json', json=payload)

    assert response.status_code == 200
    data = response.get_json()
    assert data['success'] is True
    assert data['succeeded'] == ['DE']
    assert data['failed'] == ['FR']
    assert data['results']['DE']['document'] == {
        "message": "Hallo",
        "nested": {"greeting": "Guten Morgen"},
        "version": 2
    }
    assert data['results']['FR']['success'] is False
    assert 'FR' in data['results']['FR']['error']


def test_translate_json_total_failure(client, payload):
    payload['target_languages'] = ['FR']

    response = client.post('/translation/json', json=payload)

    assert response.status_code == 502
    data = response.get_json()
    assert data['success'] is False
    assert data['failure_count'] == 1
    assert data['results']['FR']['success'] is False


def test_translate_json_unsupported_language(client, service, payload):
    payload['target_languages'] = ['DE', 'XX']

    response = client.post('/translation/json', json=payload)

    assert response.status_code == 400
    assert 'Unsupported target language: XX' in response.get_json()['error']
    assert service.calls == []


def test_translate_json_writes_files(client, payload, tmp_path):
    payload['write_files'] = True

    response = client.post('/translation/json', json=payload)

    assert response.status_code == 200
    data = response.get_json()
    output_file = (tmp_path / 'translations' / 'de.json').resolve()
    assert data['results']['DE']['output_file'] == str(output_file)
    assert json.loads(output_file.read_text(encoding='utf-8'))['message'] == 'Hallo'
    assert not (tmp_path / 'translations' / 'fr.json').exists()


def test_translate_json_target_file_requires_single_language(client, payload, tmp_path):
    payload['write_files'] = True
    payload['target_file'] = 'out.json'

    response = client.post('/translation/json', json=payload)

    assert response.status_code == 400
    assert 'single target language' in response.get_json()['error']


def test_translate_json_relative_target_file(client, payload, tmp_path):
    payload['write_files'] = True
    payload['target_languages'] = ['DE']
    payload['output_folder'] = 'release'
    payload['target_file'] = 'messages.json'

    response = client.post('/translation/json', json=payload)

    assert response.status_code == 200
    output_file = (tmp_path / 'translations' / 'release' / 'messages.json').resolve()
    assert response.get_json()['results']['DE']['output_file'] == str(output_file)
    assert json.loads(output_file.read_text(encoding='utf-8'))['message'] == 'Hallo'


@pytest.mark.parametrize("field, value, message", [
    ('target_file', 'ABSOLUTE', 'absolute paths are not allowed'),
    ('target_file', '../escape.json', 'must stay inside the output folder'),
    ('output_folder', '../elsewhere', 'must stay inside the output folder'),
    ('output_folder', 'ABSOLUTE', 'absolute paths are not allowed'),
    ('output_folder', 42, 'must be a relative path'),
])
def test_translate_json_rejects_paths_outside_output_folder(client, service, payload, tmp_path,
                                                            field, value, message):
    if value == 'ABSOLUTE':
        value = str(tmp_path / 'outside' / 'de.json')
    payload['write_files'] = True
    payload['target_languages'] = ['DE']
    payload[field] = value

    response = client.post('/translation/json', json=payload)

    assert response.status_code == 400
    assert message in response.get_json()['error']
    assert service.calls == []
    assert not (tmp_path / 'outside').exists()
    assert not (tmp_path / 'escape.json').exists()
    assert not (tmp_path / 'elsewhere').exists()


@pytest.mark.parametrize("body, message", [
    ({}, 'No JSON data provided'),
    ([1], 'No JSON data provided'),
    ("text", 'No JSON data provided'),
    ({"document": "text", "source_language": "EN", "target_languages": ["DE"]}, 'document'),
    ({"document": {}, "target_languages": ["DE"]}, 'source_language'),
    ({"document": {}, "source_language": "EN", "target_languages": "DE"}, 'target_languages'),
])
def test_translate_json_validation(client, body, message):
    response = client.post('/translation/json', json=body)

    assert response.status_code == 400
    assert message in response.get_json()['error']


def test_translate_text(client):
    response = client.post('/translation/text', json={
        "text": "Hello",
        "source_language": "EN",
        "target_languages": ["DE", "ES"]
    })

    assert response.status_code == 200
    data = response.get_json()
    assert data['translations'] == ["Hallo", "[ES] Hello"]
    assert data['csv'] == '"Hallo";"[ES] Hello"'


def test_translate_text_failure(client):
    response = client.post('/translation/text', json={
        "text": "Hello",
        "source_language": "EN",
        "target_languages": ["FR"]
    })

    assert response.status_code == 502
    assert response.get_json()['success'] is False


def test_languages_endpoint(client):
    response = client.get('/api/languages')

    assert response.status_code == 200
    data = response.get_json()
    assert data['translation_client'] == 'fake'
    assert data['data']['source_languages'] == ['DE', 'EN']
    assert 'PT-BR' in data['data']['target_languages']


def test_health(client):
    response = client.get('/health')

    assert response.status_code == 200
    assert response.get_json()['translation_client'] == 'fake'


def test_properties_file_supplies_default_languages(service, tmp_path):
    properties = tmp_path / 'transcli.properties'
    properties.write_text("authKey=abc\nsourceLanguage=EN\ntargetLanguages=DE\n", encoding='utf-8')
    app = create_app('testing', properties_file=properties, translation_service=service)

    with app.test_client() as client:
        response = client.post('/translation/json', json={"document": {"message": "Hello"}})

    assert response.status_code == 200
    assert response.get_json()['results']['DE']['document'] == {"message": "Hallo"}
