import logging
import os

from config import config, load_properties_file
from flask import Flask, jsonify
from flask_cors import CORS


def create_app(config_name=None, properties_file=None, translation_service=None):
    """
    Application factory pattern

    Args:
        config_name: Key into config.config (defaults to FLASK_ENV)
        properties_file: Optional .transcli.properties file whose authKey,
            sourceLanguage and targetLanguages override the config
        translation_service: Pre-built TranslationService (tests inject doubles)
    """
    if config_name is None:
        config_name = os.getenv("FLASK_ENV", "development")

    app = Flask(__name__)
    app.config.from_object(config[config_name])

    if properties_file is not None:
        app.config.update(load_properties_file(properties_file))

    logging.basicConfig(
        level=logging.DEBUG if app.config.get("DEBUG") else logging.INFO,
        format="%(asctime)s %(levelname)s - %(name)s - %(message)s"
    )

    # Initialize CORS for the frontend
    CORS(
        app,
        resources={
            r"/api/*": {"origins": app.config["ALLOWED_ORIGINS"]},
            r"/translation/*": {"origins": app.config["ALLOWED_ORIGINS"]},
        },
    )

    if translation_service is None:
        from services.translation_service_factory import create_translation_service

        client_name = app.config["TRANSLATION_CLIENT"]
        if client_name == "llm":
            options = {
                "provider_name": app.config["LLM_PROVIDER"],
                "model": app.config["LLM_MODEL"],
                "timeout": app.config["TRANSLATION_TIMEOUT"],
            }
        else:
            options = {
                "api_url": app.config["DEEPL_API_URL"],
                "timeout": app.config["TRANSLATION_TIMEOUT"],
            }
        translation_service = create_translation_service(
            client_name,
            auth_key=app.config["DEEPL_AUTH_KEY"],
            **options
        )
    app.extensions["translation_service"] = translation_service

    # Register API blueprints
    from routes.api import bp as api_bp
    from routes.translation import bp as translation_bp

    app.register_blueprint(api_bp)
    app.register_blueprint(translation_bp)

    # Home route
    @app.route("/")
    def home():
        return jsonify({"message": "Welcome to Polyglot JSON!", "version": "1.0.0"})

    # Health check route
    @app.route("/health")
    def health_check():
        service = app.extensions["translation_service"]
        return jsonify({"status": "healthy", "translation_client": service.get_service_name()}), 200

    return app


if __name__ == "__main__":
    app = create_app()
    app.run(debug=True, port=5001)
