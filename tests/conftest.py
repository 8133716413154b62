"""
Shared fixtures: throwaway projects on disk and offline translators.
"""

import textwrap
from pathlib import Path

import pytest

from keyring.errors import KeyringError, PasswordDeleteError

from tagstrings.errors import TranslationError
from tagstrings.translate.base import Translator


I18N_MODULE = '''
def i(text) -> str:
    """Translate a string.

    @translator
    """
    return text
'''

VIEWS_MODULE = '''
from app.i18n import i


def greet():
    return i("Hello")


def total(count: int):
    return i(f"Total: {count}")  # shown under the cart
'''


def write_project(root: Path, files: dict[str, str]) -> Path:
    for relpath, content in files.items():
        path = root / relpath
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_text(textwrap.dedent(content).lstrip("\n"), encoding="utf-8")
    return root


@pytest.fixture
def make_project(tmp_path):
    """Factory writing {relpath: source} into a fresh project folder."""
    def _make(files: dict[str, str]) -> Path:
        return write_project(tmp_path / "project", files)
    return _make


@pytest.fixture
def sample_project(make_project):
    """A package with a documented translator and two call sites."""
    return make_project({
        "app/__init__.py": "",
        "app/i18n.py": I18N_MODULE,
        "app/views.py": VIEWS_MODULE,
    })


class RecordingTranslator(Translator):
    """Prefixes the language and remembers every request."""

    def __init__(self):
        self.calls: list[tuple[str, str]] = []

    @property
    def name(self) -> str:
        return "recording"

    def translate(self, text: str, target_lang: str) -> str:
        self.calls.append((text, target_lang))
        return f"[{target_lang}] {text}"


class FailingTranslator(RecordingTranslator):
    """Fails for every text containing `marker`."""

    def __init__(self, marker: str):
        super().__init__()
        self.marker = marker

    def translate(self, text: str, target_lang: str) -> str:
        if self.marker in text:
            self.calls.append((text, target_lang))
            raise TranslationError("quota exceeded", backend=self.name, target_lang=target_lang)
        return super().translate(text, target_lang)


class SentinelDroppingTranslator(RecordingTranslator):
    """Loses every placeholder sentinel, like a careless provider."""

    def translate(self, text: str, target_lang: str) -> str:
        self.calls.append((text, target_lang))
        return "".join(ch for ch in text if not ch.isdigit())


@pytest.fixture
def recording_translator():
    return RecordingTranslator()


class MemoryKeyring:
    """Stands in for the keyring module so tests never touch the OS keychain."""

    def __init__(self, broken: bool = False):
        self.passwords: dict[tuple[str, str], str] = {}
        self.broken = broken

    def _check(self):
        if self.broken:
            raise KeyringError("no backend available")

    def get_password(self, service: str, username: str):
        self._check()
        return self.passwords.get((service, username))

    def set_password(self, service: str, username: str, password: str) -> None:
        self._check()
        self.passwords[(service, username)] = password

    def delete_password(self, service: str, username: str) -> None:
        self._check()
        if (service, username) not in self.passwords:
            raise PasswordDeleteError("Password not found")
        del self.passwords[(service, username)]


@pytest.fixture(autouse=True)
def memory_keyring(monkeypatch):
    fake = MemoryKeyring()
    monkeypatch.setattr("tagstrings.keys.keyring", fake)
    return fake
