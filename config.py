import os
from pathlib import Path

from dotenv import load_dotenv

load_dotenv()

# Default location of the legacy properties file (authKey, sourceLanguage, targetLanguages)
HOME_PROPERTIES_FILE = Path.home() / ".transcli.properties"


def _env_bool(name, default):
    return os.getenv(name, default).lower() in ("1", "true", "yes")


class Config:
    """Base configuration class"""

    SECRET_KEY = os.getenv("SECRET_KEY", "dev-secret-key-change-in-production")
    FLASK_ENV = os.getenv("FLASK_ENV", "development")
    DEBUG = os.getenv("DEBUG", "True") == "True"

    # Translation backend: "deepl" or "llm"
    TRANSLATION_CLIENT = os.getenv("TRANSLATION_CLIENT", "deepl")
    DEEPL_AUTH_KEY = os.getenv("DEEPL_AUTH_KEY")
    DEEPL_API_URL = os.getenv("DEEPL_API_URL", "https://api-free.deepl.com/v2/translate")
    TRANSLATION_TIMEOUT = float(os.getenv("TRANSLATION_TIMEOUT", "30"))

    # LLM backend: "openai", "mistral" or "ollama"
    LLM_PROVIDER = os.getenv("LLM_PROVIDER", "openai")
    LLM_MODEL = os.getenv("LLM_MODEL")

    # Fan-out and document limits
    MAX_TRANSLATION_WORKERS = int(os.getenv("MAX_TRANSLATION_WORKERS", "4"))
    MAX_DOCUMENT_DEPTH = int(os.getenv("MAX_DOCUMENT_DEPTH", "64"))
    PRESERVE_OPAQUE_LEAVES = _env_bool("PRESERVE_OPAQUE_LEAVES", "True")

    # Where translated files are written when a request asks for files
    OUTPUT_FOLDER = os.getenv("OUTPUT_FOLDER", "translations")

    ALLOWED_ORIGINS = os.getenv("ALLOWED_ORIGINS", "http://localhost:5173").split(",")


class DevelopmentConfig(Config):
    """Development environment configuration"""

    DEBUG = True


class ProductionConfig(Config):
    """Production environment configuration"""

    DEBUG = False
    MAX_TRANSLATION_WORKERS = int(os.getenv("MAX_TRANSLATION_WORKERS", "8"))


class TestingConfig(Config):
    """Testing environment configuration"""

    TESTING = True
    DEBUG = True
    TRANSLATION_CLIENT = "deepl"
    DEEPL_AUTH_KEY = "test-auth-key"
    MAX_TRANSLATION_WORKERS = 2


config = {
    "development": DevelopmentConfig,
    "production": ProductionConfig,
    "testing": TestingConfig,
    "default": DevelopmentConfig,
}


def load_properties_file(path=None):
    """
    Read a .transcli.properties file into config overrides.

    Recognised keys: authKey, sourceLanguage, targetLanguages (comma separated).
    Lines starting with '#' or '!' are comments; 'key=value' and 'key: value'
    are both accepted. A line ending in an odd number of backslashes continues
    on the next line, whose leading whitespace is dropped. Other backslash
    escapes, such as unicode escapes or escaped separators, are kept as-is.

    Returns:
        Dict with any of DEEPL_AUTH_KEY, SOURCE_LANGUAGE, TARGET_LANGUAGES

    Raises:
        ConfigurationError: If the file cannot be read
    """
    from services.exceptions import ConfigurationError

    path = Path(path) if path is not None else HOME_PROPERTIES_FILE
    try:
        lines = path.read_text(encoding="utf-8").splitlines()
    except OSError as e:
        raise ConfigurationError(f"Failed to load file: {path}") from e

    properties = {}
    for line in _logical_lines(lines):
        if not line or line[0] in "#!":
            continue
        separators = [i for i in (line.find("="), line.find(":")) if i != -1]
        if not separators:
            properties[line] = ""
            continue
        index = min(separators)
        properties[line[:index].strip()] = line[index + 1:].strip()

    overrides = {}
    if properties.get("authKey"):
        overrides["DEEPL_AUTH_KEY"] = properties["authKey"]
    if properties.get("sourceLanguage"):
        overrides["SOURCE_LANGUAGE"] = properties["sourceLanguage"]
    if properties.get("targetLanguages"):
        overrides["TARGET_LANGUAGES"] = [
            language.strip() for language in properties["targetLanguages"].split(",") if language.strip()
        ]
    return overrides


def _logical_lines(lines):
    """Join backslash-continued physical lines into stripped logical lines"""
    pending = None
    for raw in lines:
        line = raw.strip()
        if pending is not None:
            line = pending + line
        elif line[:1] in ("#", "!"):
            yield line
            continue
        trailing = len(line) - len(line.rstrip("\\"))
        if trailing % 2 == 1:
            pending = line[:-1]
            continue
        pending = None
        yield line
    if pending is not None:
        yield pending
