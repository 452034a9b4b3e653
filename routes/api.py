from flask import Blueprint, current_app, jsonify

bp = Blueprint('api', __name__, url_prefix='/api')


@bp.route('/languages', methods=['GET'])
def get_languages():
    """
    Get the languages supported by the configured translation service.

    Returns:
        JSON object with sorted source and target language code lists
    """
    try:
        service = current_app.extensions['translation_service']
        source_languages = sorted(service.get_supported_source_languages())
        target_languages = sorted(service.get_supported_target_languages())

        return jsonify({
            'success': True,
            'translation_client': service.get_service_name(),
            'data': {
                'source_languages': source_languages,
                'target_languages': target_languages
            }
        }), 200

    except Exception as e:
        current_app.logger.error(f"Failed to list languages: {e}")
        return jsonify({
            'success': False,
            'error': str(e)
        }), 500
