"""
Translation backends for tagstrings.
"""

from .base import DummyTranslator, Translator, create_translator
from tagstrings.errors import TranslationError

__all__ = ["DummyTranslator", "TranslationError", "Translator", "create_translator"]
