"""
Azure Translator backend (Translator Text API v3).

Usage:
    translator = AzureTranslator(api_key="...")
    languages = translator.supported_languages()
    print(translator.translate("Hello world", "de"))

Azure Translator is free for fewer than 2 million characters per month:
https://azure.microsoft.com/en-us/pricing/details/cognitive-services/translator/
"""

from __future__ import annotations

import logging
import os
from typing import Any, Optional

import requests

from tagstrings.config import (
    AZURE_API_VERSION,
    AZURE_ENDPOINT,
    REGION_ENV_VAR,
    REQUEST_TIMEOUT,
    SOURCE_LANGUAGE,
)
from tagstrings.errors import ConfigurationError, TranslationError
from tagstrings.translate.base import Translator

logger = logging.getLogger(__name__)


class AzureTranslator(Translator):
    """Azure Translator REST client."""

    def __init__(
        self,
        api_key: Optional[str] = None,
        region: Optional[str] = None,
        endpoint: Optional[str] = None,
        source_lang: str = SOURCE_LANGUAGE,
        session: Optional[requests.Session] = None,
    ):
        if not api_key:
            raise ConfigurationError(
                "Missing Azure Translator key (--key= or environment variable 'translator_key').\n"
                "You can get access to Azure Translator at "
                "https://azure.microsoft.com/en-us/pricing/details/cognitive-services/translator/\n"
                "(it's free for < 2 million characters translated per month.)"
            )
        self.api_key = api_key
        self.region = region or os.getenv(REGION_ENV_VAR)
        self.endpoint = (endpoint or AZURE_ENDPOINT).rstrip("/")
        self.source_lang = source_lang
        self.session = session or requests.Session()

    @property
    def name(self) -> str:
        return "azure"

    @property
    def requires_key(self) -> bool:
        return True

    def _headers(self) -> dict[str, str]:
        headers = {
            "Ocp-Apim-Subscription-Key": self.api_key,
            "Content-Type": "application/json; charset=UTF-8",
        }
        if self.region:
            headers["Ocp-Apim-Subscription-Region"] = self.region
        return headers

    def supported_languages(self) -> dict[str, str]:
        """Fetch the translation language list (no key needed for this call)."""
        try:
            response = self.session.get(
                f"{self.endpoint}/languages",
                params={"api-version": AZURE_API_VERSION, "scope": "translation"},
                timeout=REQUEST_TIMEOUT,
            )
            response.raise_for_status()
            data: dict[str, Any] = response.json()
        except (requests.exceptions.RequestException, ValueError) as e:
            raise ConfigurationError(f"language information download error: {e}") from e

        languages = data.get("translation", {})
        return {code: info.get("name", code) for code, info in languages.items()}

    def translate(self, text: str, target_lang: str) -> str:
        try:
            response = self.session.post(
                f"{self.endpoint}/translate",
                params={"api-version": AZURE_API_VERSION, "from": self.source_lang, "to": target_lang},
                headers=self._headers(),
                json=[{"Text": text}],
                timeout=REQUEST_TIMEOUT,
            )
            response.raise_for_status()
            data = response.json()
        except requests.exceptions.RequestException as e:
            raise TranslationError(str(e), backend=self.name, target_lang=target_lang) from e
        except ValueError as e:
            raise TranslationError(f"invalid response: {e}", backend=self.name, target_lang=target_lang) from e

        try:
            return data[0]["translations"][0]["text"]
        except (IndexError, KeyError, TypeError) as e:
            raise TranslationError(
                f"unexpected response shape: {data!r}", backend=self.name, target_lang=target_lang
            ) from e
