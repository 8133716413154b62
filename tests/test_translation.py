"""
Tests for translation backends and API keys.

Tests cover:
- DummyTranslator modes
- Backend factory and aliases
- Azure Translator requests and error handling (HTTP mocked)
- MyMemory requests and error handling (HTTP mocked)
- KeyManager lookup order and storage (keychain mocked)
"""

from unittest.mock import MagicMock

import pytest
import requests

from conftest import MemoryKeyring
from tagstrings.config import LANGUAGES
from tagstrings.errors import ConfigurationError, TranslationError
from tagstrings.keys import KeyManager, mask_key
from tagstrings.translate import DummyTranslator, create_translator
from tagstrings.translate.azure import AzureTranslator
from tagstrings.translate.mymemory import MyMemoryTranslator


def fake_response(payload, status_error=None):
    response = MagicMock()
    response.json.return_value = payload
    if status_error is not None:
        response.raise_for_status.side_effect = status_error
    return response


class TestDummyTranslator:
    """Offline translator used in tests and dry runs."""

    def test_prefix(self):
        assert DummyTranslator().translate("Hello", "de") == "[de] Hello"

    def test_echo(self):
        assert DummyTranslator("echo").translate("Hello", "de") == "Hello"

    def test_upper(self):
        assert DummyTranslator("upper").translate("Hello", "de") == "HELLO"

    def test_invalid_mode(self):
        with pytest.raises(ValueError, match="Unknown dummy mode"):
            DummyTranslator("reverse")

    def test_supported_languages_default_to_static_table(self):
        assert DummyTranslator().supported_languages() == LANGUAGES


class TestCreateTranslator:
    """Backend factory."""

    @pytest.mark.parametrize("backend", ["dummy", "test", "echo"])
    def test_dummy_aliases(self, backend):
        assert isinstance(create_translator(backend), DummyTranslator)

    @pytest.mark.parametrize("backend", ["mymemory", "free"])
    def test_mymemory_aliases(self, backend):
        assert isinstance(create_translator(backend), MyMemoryTranslator)

    def test_azure_with_key(self):
        translator = create_translator("microsoft", api_key="secret")
        assert isinstance(translator, AzureTranslator)
        assert translator.requires_key

    def test_azure_without_key(self):
        with pytest.raises(ConfigurationError, match="Missing Azure Translator key"):
            create_translator("azure")

    def test_unknown_backend(self):
        with pytest.raises(ValueError, match="Unknown translator backend"):
            create_translator("babelfish")


class TestAzureTranslator:
    """Azure Translator REST calls."""

    def make(self, session):
        return AzureTranslator(api_key="secret", region="westeurope", session=session)

    def test_translate(self):
        session = MagicMock()
        session.post.return_value = fake_response([{"translations": [{"text": "Hallo", "to": "de"}]}])

        assert self.make(session).translate("Hello", "de") == "Hallo"

        _, kwargs = session.post.call_args
        assert kwargs["json"] == [{"Text": "Hello"}]
        assert kwargs["params"]["to"] == "de"
        assert kwargs["headers"]["Ocp-Apim-Subscription-Key"] == "secret"
        assert kwargs["headers"]["Ocp-Apim-Subscription-Region"] == "westeurope"

    def test_network_error(self):
        session = MagicMock()
        session.post.side_effect = requests.exceptions.ConnectionError("down")
        with pytest.raises(TranslationError) as excinfo:
            self.make(session).translate("Hello", "de")
        assert excinfo.value.backend == "azure"
        assert excinfo.value.target_lang == "de"

    def test_http_error(self):
        session = MagicMock()
        session.post.return_value = fake_response({}, requests.exceptions.HTTPError("429 Too Many Requests"))
        with pytest.raises(TranslationError, match="429"):
            self.make(session).translate("Hello", "de")

    def test_unexpected_payload(self):
        session = MagicMock()
        session.post.return_value = fake_response({"error": "nope"})
        with pytest.raises(TranslationError, match="unexpected response"):
            self.make(session).translate("Hello", "de")

    def test_supported_languages(self):
        session = MagicMock()
        session.get.return_value = fake_response({"translation": {"de": {"name": "German"}, "fr": {"name": "French"}}})
        assert self.make(session).supported_languages() == {"de": "German", "fr": "French"}

    def test_supported_languages_download_error(self):
        session = MagicMock()
        session.get.side_effect = requests.exceptions.Timeout("slow")
        with pytest.raises(ConfigurationError, match="language information download error"):
            self.make(session).supported_languages()


class TestMyMemoryTranslator:
    """MyMemory free API calls."""

    def test_translate(self):
        session = MagicMock()
        session.get.return_value = fake_response({
            "responseStatus": 200,
            "responseData": {"translatedText": "Hallo"},
        })
        translator = MyMemoryTranslator(delay=0, session=session)
        assert translator.translate("Hello", "de") == "Hallo"
        _, kwargs = session.get.call_args
        assert kwargs["params"]["langpair"] == "en|de"

    def test_error_status(self):
        session = MagicMock()
        session.get.return_value = fake_response({"responseStatus": "403", "responseDetails": "INVALID LANGUAGE PAIR"})
        with pytest.raises(TranslationError, match="INVALID LANGUAGE PAIR"):
            MyMemoryTranslator(delay=0, session=session).translate("Hello", "xx")

    def test_text_too_long(self):
        session = MagicMock()
        with pytest.raises(TranslationError, match="longer than"):
            MyMemoryTranslator(delay=0, session=session).translate("x" * 501, "de")
        session.get.assert_not_called()

    def test_blank_text_is_not_sent(self):
        session = MagicMock()
        assert MyMemoryTranslator(delay=0, session=session).translate("  ", "de") == "  "
        session.get.assert_not_called()


class TestKeyManager:
    """API key lookup order: option > environment > keychain > config file."""

    @pytest.fixture
    def km(self, tmp_path, monkeypatch):
        monkeypatch.delenv("TRANSLATOR_KEY", raising=False)
        monkeypatch.delenv("translator_key", raising=False)
        return KeyManager(config_file=tmp_path / "keys.json")

    def test_no_key(self, km):
        assert km.get_key("azure") is None
        assert not km.get_key_info("azure").is_set

    def test_require_key(self, km):
        with pytest.raises(ConfigurationError, match="Missing API key"):
            km.require_key("azure")

    def test_stored_key_goes_to_keychain(self, km, memory_keyring):
        assert km.set_key("azure", "stored-key") == "keyring"
        assert memory_keyring.passwords[("tagstrings", "azure")] == "stored-key"
        assert km.get_key("azure") == "stored-key"
        assert km.get_key_info("azure").source == "keyring"
        assert not km.config_file.exists()

    def test_keychain_disabled_uses_file(self, tmp_path, monkeypatch):
        monkeypatch.delenv("TRANSLATOR_KEY", raising=False)
        monkeypatch.delenv("translator_key", raising=False)
        km = KeyManager(config_file=tmp_path / "keys.json", use_keyring=False)
        assert km.set_key("azure", "stored-key") == str(tmp_path / "keys.json")
        assert km.get_key_info("azure").source == "config"

    def test_broken_keychain_falls_back_to_file(self, km, monkeypatch):
        monkeypatch.setattr("tagstrings.keys.keyring", MemoryKeyring(broken=True))
        assert km.set_key("azure", "stored-key") == str(km.config_file)
        assert km.get_key("azure") == "stored-key"
        assert km.get_key_info("azure").source == "config"
        assert km.delete_key("azure")

    def test_keychain_wins_over_file(self, km, memory_keyring):
        km.config_file.write_text('{"azure": "file-key"}')
        memory_keyring.passwords[("tagstrings", "azure")] = "chain-key"
        assert km.get_key("azure") == "chain-key"

    def test_environment_wins_over_stored_key(self, km, monkeypatch):
        km.set_key("azure", "stored-key")
        monkeypatch.setenv("translator_key", "env-key")
        assert km.get_key("azure") == "env-key"

    def test_explicit_wins(self, km, monkeypatch):
        monkeypatch.setenv("TRANSLATOR_KEY", "env-key")
        assert km.get_key("azure", explicit="cli-key") == "cli-key"
        assert km.get_key_info("azure", explicit="cli-key").source == "option"

    def test_delete(self, km):
        km.set_key("azure", "stored-key")
        assert km.delete_key("azure")
        assert not km.delete_key("azure")
        assert km.get_key("azure") is None

    def test_unreadable_file_is_ignored(self, km):
        km.config_file.write_text("{not json")
        assert km.get_key("azure") is None

    def test_mask_key(self):
        assert mask_key("short") == "*****"
        assert mask_key("abcd1234efgh5678") == "abcd...5678"
