"""OpenProject API-key credentials backed by the OS keyring."""

from __future__ import annotations

import logging

import keyring
import keyring.errors

from openproject_dashboard.services.config_manager import ConfigManager

logger = logging.getLogger(__name__)

KEYRING_SERVICE = "openproject-dashboard"
_API_KEY_ENTRY = "api_key"


class AuthManager:
    """Store the OpenProject instance URL and API key.

    The key lives in the OS keyring; the ``ConfigManager`` holds only the
    non-secret instance URL.
    """

    def __init__(self, config: ConfigManager) -> None:
        self._config = config

    @property
    def base_url(self) -> str:
        """Return the stored OpenProject instance URL."""
        return str(self._config.get("base_url", ""))

    @property
    def is_configured(self) -> bool:
        """Return True when an instance URL has been stored."""
        return bool(self.base_url)

    def login(self, url: str, api_key: str) -> None:
        """Store credentials: the key in keyring, the URL in config."""
        keyring.set_password(KEYRING_SERVICE, _API_KEY_ENTRY, api_key)
        self._config.set("base_url", url.rstrip("/"))
        logger.info("API key stored for %s", self.base_url)

    def get_api_key(self) -> str | None:
        """Retrieve the API key from the OS keyring."""
        return keyring.get_password(KEYRING_SERVICE, _API_KEY_ENTRY)

    def logout(self) -> None:
        """Forget the stored API key and instance URL."""
        logger.info("Logging out — clearing API key and instance URL")
        try:
            keyring.delete_password(KEYRING_SERVICE, _API_KEY_ENTRY)
        except keyring.errors.PasswordDeleteError:
            logger.debug("No API key stored in keyring")
        self._config.set("base_url", "")
