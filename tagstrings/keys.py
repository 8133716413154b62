"""
API key management for tagstrings.

Keys are looked up in this order:
1. The --key option (passed in explicitly)
2. Environment variables (TRANSLATOR_KEY, translator_key)
3. OS keychain via keyring
4. Local config file (~/.tagstrings/keys.json, fallback)

Usage:
    from tagstrings.keys import KeyManager

    km = KeyManager()
    km.set_key("azure", "...")
    key = km.get_key("azure")
"""

from __future__ import annotations

import json
import logging
import os
from dataclasses import dataclass
from pathlib import Path
from typing import Optional

import keyring
from keyring.errors import KeyringError, PasswordDeleteError

from tagstrings.config import APP_NAME, KEY_ENV_VARS, KEYS_FILE
from tagstrings.errors import ConfigurationError

logger = logging.getLogger(__name__)


@dataclass
class KeyInfo:
    """Information about an API key."""
    service: str
    is_set: bool
    source: str  # 'option', 'env', 'keyring', 'config', 'none'
    masked_value: str  # e.g., "ab12...ef34"


class KeyManager:
    """Find and store translation provider keys."""

    SERVICE_NAME = APP_NAME

    def __init__(
        self,
        config_file: Optional[Path] = None,
        env_vars: tuple[str, ...] = KEY_ENV_VARS,
        use_keyring: bool = True,
    ):
        self.config_file = Path(config_file) if config_file else KEYS_FILE
        self.env_vars = env_vars
        self.use_keyring = use_keyring

    def _read_config(self) -> dict[str, str]:
        if not self.config_file.exists():
            return {}
        try:
            config = json.loads(self.config_file.read_text(encoding="utf-8"))
        except (OSError, json.JSONDecodeError) as e:
            logger.warning(f"Ignoring unreadable key file {self.config_file}: {e}")
            return {}
        return config if isinstance(config, dict) else {}

    def _write_config(self, config: dict[str, str]) -> None:
        self.config_file.parent.mkdir(parents=True, exist_ok=True)
        self.config_file.write_text(json.dumps(config, indent=2), encoding="utf-8")
        self.config_file.chmod(0o600)  # Restrict permissions

    def _keyring_get(self, service: str) -> Optional[str]:
        if not self.use_keyring:
            return None
        try:
            return keyring.get_password(self.SERVICE_NAME, service.lower())
        except KeyringError as e:
            logger.debug(f"OS keychain unavailable: {e}")
            return None

    def _lookup(self, service: str) -> tuple[Optional[str], str]:
        for env_var in self.env_vars:
            if env_val := os.getenv(env_var):
                return env_val, "env"
        if key := self._keyring_get(service):
            return key, "keyring"
        if key := self._read_config().get(service.lower()):
            return key, "config"
        return None, "none"

    def get_key(self, service: str, explicit: Optional[str] = None) -> Optional[str]:
        """Get the API key for a translation service.

        Args:
            service: Backend name (azure, ...)
            explicit: Key given on the command line; wins when set

        Returns:
            API key string or None if not found
        """
        if explicit:
            return explicit
        key, _ = self._lookup(service)
        return key

    def require_key(self, service: str, explicit: Optional[str] = None) -> str:
        """Get the API key or raise ConfigurationError if there is none."""
        key = self.get_key(service, explicit)
        if not key:
            raise ConfigurationError(
                f"Missing API key for '{service}' (--key= or environment variable "
                f"'{self.env_vars[-1]}', or run: tagstrings key set <KEY>)"
            )
        return key

    def set_key(self, service: str, key: str) -> str:
        """Store an API key, in the OS keychain when one is usable.

        Returns:
            Storage location used ('keyring' or the config file path)
        """
        service = service.lower()
        if self.use_keyring:
            try:
                keyring.set_password(self.SERVICE_NAME, service, key)
                return "keyring"
            except KeyringError as e:
                logger.warning(f"OS keychain unavailable ({e}); storing the key in {self.config_file}")

        config = self._read_config()
        config[service] = key
        self._write_config(config)
        return str(self.config_file)

    def delete_key(self, service: str) -> bool:
        """Delete a stored key from the keychain and the config file.

        Returns:
            True if a key was removed from either place
        """
        service = service.lower()
        deleted = False
        if self.use_keyring:
            try:
                keyring.delete_password(self.SERVICE_NAME, service)
                deleted = True
            except PasswordDeleteError:
                pass
            except KeyringError as e:
                logger.debug(f"OS keychain unavailable: {e}")

        config = self._read_config()
        if service in config:
            del config[service]
            self._write_config(config)
            deleted = True
        return deleted

    def get_key_info(self, service: str, explicit: Optional[str] = None) -> KeyInfo:
        """Describe where the key for a service comes from."""
        if explicit:
            key, source = explicit, "option"
        else:
            key, source = self._lookup(service)
        return KeyInfo(
            service=service,
            is_set=key is not None,
            source=source,
            masked_value=mask_key(key) if key else "",
        )


def mask_key(key: str) -> str:
    """Mask a key for display (show first 4 and last 4 chars)."""
    if len(key) <= 12:
        return "*" * len(key)
    return f"{key[:4]}...{key[-4:]}"
