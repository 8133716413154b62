"""MyMemory API translator - Free translation service."""

from __future__ import annotations

import time
from typing import Optional

import requests

from tagstrings.config import MYMEMORY_ENDPOINT, SOURCE_LANGUAGE
from tagstrings.errors import TranslationError
from tagstrings.translate.base import Translator


class MyMemoryTranslator(Translator):
    """MyMemory translation API - free, no key required."""

    API_URL = MYMEMORY_ENDPOINT
    MAX_CHARS = 500  # free tier request limit

    def __init__(
        self,
        source_lang: str = SOURCE_LANGUAGE,
        email: Optional[str] = None,
        delay: float = 0.3,
        session: Optional[requests.Session] = None,
    ):
        """Initialize the translator."""
        self.source_lang = source_lang
        self.email = email
        self.delay = delay
        self.session = session or requests.Session()
        self._last_request = 0.0

    @property
    def name(self) -> str:
        return "mymemory"

    def translate(self, text: str, target_lang: str) -> str:
        """Translate text using MyMemory API."""
        if not text.strip():
            return text
        if len(text) > self.MAX_CHARS:
            raise TranslationError(
                f"text longer than {self.MAX_CHARS} characters", backend=self.name, target_lang=target_lang
            )

        params = {"q": text, "langpair": f"{self.source_lang}|{target_lang}"}
        if self.email:
            params["de"] = self.email

        # Rate limiting
        wait = self.delay - (time.monotonic() - self._last_request)
        if wait > 0:
            time.sleep(wait)

        try:
            response = self.session.get(self.API_URL, params=params, timeout=10)
            self._last_request = time.monotonic()
            response.raise_for_status()
            data = response.json()
        except requests.exceptions.RequestException as e:
            raise TranslationError(str(e), backend=self.name, target_lang=target_lang) from e
        except ValueError as e:
            raise TranslationError(f"invalid response: {e}", backend=self.name, target_lang=target_lang) from e

        # responseStatus is sometimes sent as a string
        if str(data.get("responseStatus")) != "200":
            raise TranslationError(
                str(data.get("responseDetails", "Unknown error")), backend=self.name, target_lang=target_lang
            )
        return data.get("responseData", {}).get("translatedText", text)
