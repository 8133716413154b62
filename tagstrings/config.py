"""
Project-wide configuration constants.

This module defines the names, defaults and lookup tables used throughout
tagstrings. Nothing here touches the filesystem at import time.

Module Contents:
    APP_NAME: Application name for display purposes
    TRANSLATOR_TAG: Docstring marker of the designated translator function
    FALLBACK_TRANSLATOR_NAME: Callee name used when no function is marked
    DEFAULT_OUTPUT_DIR: Catalog folder, relative to the project root
    EXCLUDED_DIRS: Directory names never scanned
    LANGUAGES: Static language table (used when no provider lists languages)
    BACKENDS: Available translation backends

Example:
    >>> from tagstrings.config import DEFAULT_OUTPUT_DIR, LANGUAGES
    >>> print(DEFAULT_OUTPUT_DIR, LANGUAGES["de"])
"""

from pathlib import Path

# Application name for display and identification
APP_NAME = "tagstrings"

HOMEPAGE = "https://github.com/tagstrings/tagstrings"

# Marker placed in the docstring of the project's translator function
TRANSLATOR_TAG = "@translator"

# Callee name treated as the translator when no function carries TRANSLATOR_TAG
FALLBACK_TRANSLATOR_NAME = "i"

# Where catalogs live unless --output is given (relative to the project root)
DEFAULT_OUTPUT_DIR = "i18n"

# Name of the mapping exported by module catalogs
MODULE_MAPPING_NAME = "translations"

# Document catalogs: <base>.json holds canonical text, <base>.<lang>.json translations
DOCUMENT_BASE_NAME = "messages"

# Canonical language of the scanned source strings
SOURCE_LANGUAGE = "en"

# Sentinel wrapped around the ordinal of a protected ${...} span.
# Numbers survive machine translation far better than punctuation does.
SENTINEL_PREFIX = "77"
SENTINEL_SUFFIX = "77"

# Environment variables consulted for the translator API key, in order
KEY_ENV_VARS = ("TRANSLATOR_KEY", "translator_key")
REGION_ENV_VAR = "TRANSLATOR_REGION"

# User-level key storage
CONFIG_DIR = Path.home() / ".tagstrings"
KEYS_FILE = CONFIG_DIR / "keys.json"

# Translation provider endpoints
AZURE_ENDPOINT = "https://api.cognitive.microsofttranslator.com"
AZURE_API_VERSION = "3.0"
MYMEMORY_ENDPOINT = "https://api.mymemory.translated.net/get"
REQUEST_TIMEOUT = 30

DEFAULT_BACKEND = "azure"

BACKENDS = {
    "azure": "Azure Translator (API key required)",
    "mymemory": "MyMemory free API (no key, rate limited)",
    "dummy": "Offline echo translator (testing)",
}

# Backends that refuse to start without an API key
KEYED_BACKENDS = {"azure", "microsoft"}

# Directories to exclude from scanning
EXCLUDED_DIRS = {
    "__pycache__",
    ".git",
    ".hg",
    ".svn",
    ".mypy_cache",
    ".pytest_cache",
    ".tox",
    ".nox",
    "build",
    "dist",
    "htmlcov",
    "node_modules",
    "venv",
    "env",
    ".venv",
    ".env",
}

LANGUAGES = {
    "ar": "Arabic",
    "bg": "Bulgarian",
    "cs": "Czech",
    "da": "Danish",
    "de": "German",
    "el": "Greek",
    "en": "English",
    "es": "Spanish",
    "et": "Estonian",
    "fi": "Finnish",
    "fr": "French",
    "he": "Hebrew",
    "hi": "Hindi",
    "hu": "Hungarian",
    "id": "Indonesian",
    "it": "Italian",
    "ja": "Japanese",
    "ko": "Korean",
    "lt": "Lithuanian",
    "lv": "Latvian",
    "nb": "Norwegian",
    "nl": "Dutch",
    "pl": "Polish",
    "pt": "Portuguese",
    "ro": "Romanian",
    "ru": "Russian",
    "sk": "Slovak",
    "sl": "Slovenian",
    "sv": "Swedish",
    "th": "Thai",
    "tr": "Turkish",
    "uk": "Ukrainian",
    "vi": "Vietnamese",
    "zh-Hans": "Chinese Simplified",
    "zh-Hant": "Chinese Traditional",
}
