"""
Base translator interface and implementations.

This module defines:
- Abstract Translator interface that all backends implement
- DummyTranslator for testing (echo or simple transformations)
- create_translator factory

Design Philosophy:
- Translators are stateless between calls: one text, one target language
- Failures raise TranslationError; callers decide how to degrade
- Supported languages are listed once per run, before any translation
"""

from __future__ import annotations

from abc import ABC, abstractmethod

from tagstrings.config import LANGUAGES
from tagstrings.errors import TranslationError


class Translator(ABC):
    """Abstract base class for all translation backends.

    All translators must implement:
    - name: backend name used in generated catalog comments
    - translate(): translate one text into one target language
    """

    @property
    @abstractmethod
    def name(self) -> str:
        """Return the translator name (e.g., 'azure', 'mymemory', 'dummy')."""

    @property
    def requires_key(self) -> bool:
        return False

    @abstractmethod
    def translate(self, text: str, target_lang: str) -> str:
        """Translate a single text.

        Args:
            text: Source text (sentinels already in place of placeholders)
            target_lang: Target language code

        Returns:
            Translated text

        Raises:
            TranslationError: On network, quota or language errors
        """

    def supported_languages(self) -> dict[str, str]:
        """Language code -> display name. Defaults to the static table."""
        return dict(LANGUAGES)


class DummyTranslator(Translator):
    """A dummy translator for testing.

    Modes:
    - 'echo': Return the input unchanged
    - 'upper': Return uppercase version
    - 'prefix': Add [<lang>] prefix
    """

    MODES = ("echo", "upper", "prefix")

    def __init__(self, mode: str = "prefix"):
        if mode not in self.MODES:
            raise ValueError(f"Unknown dummy mode: {mode}. Available modes: {', '.join(self.MODES)}")
        self.mode = mode

    @property
    def name(self) -> str:
        return f"dummy-{self.mode}"

    def translate(self, text: str, target_lang: str) -> str:
        if self.mode == "echo":
            return text
        if self.mode == "upper":
            return text.upper()
        return f"[{target_lang}] {text}"


def create_translator(backend: str, **kwargs) -> Translator:
    """Factory function to create a translator by name.

    Args:
        backend: Translator backend name ('azure', 'mymemory', 'dummy')
        **kwargs: Backend-specific arguments

    Returns:
        Configured Translator instance

    Supported backends and aliases:
        - azure, microsoft: Azure Translator (api_key, region, endpoint)
        - mymemory, free: MyMemory free API (email for a higher quota)
        - dummy, echo, test: Offline test translator (mode)
    """
    backend_lower = backend.lower().replace("_", "-")

    if backend_lower in ("azure", "microsoft"):
        from tagstrings.translate.azure import AzureTranslator
        return AzureTranslator(
            api_key=kwargs.get("api_key"),
            region=kwargs.get("region"),
            endpoint=kwargs.get("endpoint"),
        )

    elif backend_lower in ("mymemory", "free"):
        from tagstrings.translate.mymemory import MyMemoryTranslator
        return MyMemoryTranslator(email=kwargs.get("email"))

    elif backend_lower in ("dummy", "echo", "test"):
        return DummyTranslator(mode=kwargs.get("mode", "echo" if backend_lower == "echo" else "prefix"))

    available = ["azure", "mymemory", "dummy"]
    raise ValueError(
        f"Unknown translator backend: {backend}. "
        f"Available backends: {', '.join(available)}"
    )


__all__ = ["Translator", "DummyTranslator", "TranslationError", "create_translator"]
