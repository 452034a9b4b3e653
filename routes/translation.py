import logging
from pathlib import Path

from flask import Blueprint, current_app, jsonify, request
from models.document import Node
from services.exceptions import (
    AggregateTranslationError,
    DocumentTranslationError,
    UnsupportedLanguageError,
)
from services.output_writer import FileOutputHandler
from services.text_translation_service import format_csv_line, translate_text_to_languages
from services.translation_fanout import run

logger = logging.getLogger(__name__)

bp = Blueprint('translation', __name__, url_prefix='/translation')


def _languages_from_request(data):
    """Read source/target languages, falling back to configured defaults"""
    source_language = data.get('source_language') or current_app.config.get('SOURCE_LANGUAGE')
    target_languages = data.get('target_languages')
    if target_languages is None:
        target_languages = current_app.config.get('TARGET_LANGUAGES')
    return source_language, target_languages


def _validation_error(message):
    return jsonify({'success': False, 'error': message}), 400


def _confined_path(base, value, field):
    """
    Resolve a client-supplied relative path under base.

    Raises ValueError for non-string or absolute values and for paths that
    resolve outside base.
    """
    if not isinstance(value, str) or not value:
        raise ValueError(f'Invalid field: {field} (must be a relative path)')
    if Path(value).is_absolute():
        raise ValueError(f'Invalid field: {field} (absolute paths are not allowed)')
    candidate = (base / value).resolve()
    try:
        candidate.relative_to(base)
    except ValueError:
        raise ValueError(f'Invalid field: {field} (must stay inside the output folder)')
    return candidate


def _output_handler_from_request(data, target_languages):
    """Build a FileOutputHandler whose paths stay inside OUTPUT_FOLDER"""
    base = Path(current_app.config['OUTPUT_FOLDER']).resolve()
    target_file = data.get('target_file')
    if target_file is not None and len(set(target_languages)) > 1:
        raise ValueError('target_file can only be used with a single target language')

    output_folder = base
    if data.get('output_folder') is not None:
        output_folder = _confined_path(base, data['output_folder'], 'output_folder')
    if target_file is not None:
        return FileOutputHandler(target_file=_confined_path(output_folder, target_file, 'target_file'))
    return FileOutputHandler(output_folder=output_folder)


@bp.route('/json', methods=['POST'])
def translate_json():
    """
    Translate the string values of a JSON document into several languages.

    Request body:
    {
        "document": {"message": "Hello", "nested": {"greeting": "Good morning"}},
        "source_language": "EN",
        "target_languages": ["DE", "FR"],
        "write_files": false,            // optional, write <lang>.json files
        "output_folder": "release",      // optional, relative to OUTPUT_FOLDER
        "target_file": "de.json"         // optional, relative, single target only
    }

    Response (partial success):
    {
        "success": true,
        "source_language": "EN",
        "results": {
            "DE": {"success": true, "document": {"message": "Hallo", ...}},
            "FR": {"success": false, "error": "DeepL HTTP 503: ..."}
        },
        "succeeded": ["DE"],
        "failed": ["FR"]
    }
    """
    data = request.get_json(silent=True)
    if not isinstance(data, dict) or not data:
        return _validation_error('No JSON data provided')

    document_data = data.get('document')
    if not isinstance(document_data, dict):
        return _validation_error('Missing or invalid field: document (must be an object)')

    source_language, target_languages = _languages_from_request(data)
    if not source_language:
        return _validation_error('Missing required field: source_language')
    if not isinstance(target_languages, list) or not all(isinstance(t, str) for t in target_languages):
        return _validation_error('Missing or invalid field: target_languages (must be a list)')

    output_handler = None
    if data.get('write_files'):
        try:
            output_handler = _output_handler_from_request(data, target_languages)
        except ValueError as e:
            return _validation_error(str(e))

    try:
        document = Node.from_dict(document_data)
    except TypeError as e:
        return _validation_error(f'Invalid document: {e}')

    try:
        outcomes = run(
            document,
            source_language,
            target_languages,
            current_app.extensions['translation_service'],
            max_workers=current_app.config['MAX_TRANSLATION_WORKERS'],
            preserve_opaque=current_app.config['PRESERVE_OPAQUE_LEAVES'],
            max_depth=current_app.config['MAX_DOCUMENT_DEPTH'],
            output_handler=output_handler
        )
    except UnsupportedLanguageError as e:
        return _validation_error(str(e))
    except AggregateTranslationError as e:
        return jsonify({
            'success': False,
            'error': str(e),
            'failure_count': e.failure_count,
            'results': {
                language: {'success': False, 'error': str(error)}
                for language, error in e.failures.items()
            }
        }), 502
    except Exception as e:
        logger.error(f"Document translation failed: {e}", exc_info=True)
        return jsonify({'success': False, 'error': f'Server error: {str(e)}'}), 500

    results = {}
    for language, outcome in outcomes.items():
        if outcome.succeeded:
            entry = {'success': True, 'document': outcome.document.to_dict()}
            if output_handler is not None:
                entry['output_file'] = str(output_handler.path_for(language))
        else:
            entry = {'success': False, 'error': str(outcome.error)}
        results[language] = entry

    return jsonify({
        'success': True,
        'source_language': source_language,
        'results': results,
        'succeeded': [language for language, outcome in outcomes.items() if outcome.succeeded],
        'failed': [language for language, outcome in outcomes.items() if not outcome.succeeded]
    }), 200


@bp.route('/text', methods=['POST'])
def translate_text():
    """
    Translate plain text into several languages.

    Request body:
    {
        "text": "Hello",
        "source_language": "EN",
        "target_languages": ["DE", "FR"]
    }

    Response (translations follow the order of target_languages):
    {
        "success": true,
        "translations": ["Hallo", "Bonjour"],
        "csv": "\"Hallo\";\"Bonjour\""
    }
    """
    data = request.get_json(silent=True)
    if not isinstance(data, dict) or not data:
        return _validation_error('No JSON data provided')

    text = data.get('text')
    if not text:
        return _validation_error('Missing required field: text')

    source_language, target_languages = _languages_from_request(data)
    if not source_language:
        return _validation_error('Missing required field: source_language')
    if not isinstance(target_languages, list) or not target_languages:
        return _validation_error('Missing or invalid field: target_languages (must be a list)')

    try:
        translations = translate_text_to_languages(
            text,
            source_language,
            target_languages,
            current_app.extensions['translation_service']
        )
    except UnsupportedLanguageError as e:
        return _validation_error(str(e))
    except DocumentTranslationError as e:
        logger.error(f"Text translation failed: {e}")
        return jsonify({'success': False, 'error': str(e)}), 502

    return jsonify({
        'success': True,
        'original_text': text,
        'source_language': source_language,
        'target_languages': target_languages,
        'translations': translations,
        'csv': format_csv_line(translations)
    }), 200
