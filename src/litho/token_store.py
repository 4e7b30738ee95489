"""
Refresh-token cache in the operating system's keyring.

Entries are stored under a service name (the OAuth client id by default) and
an account name (the local user).
"""

import getpass
import logging

import keyring
from keyring.errors import KeyringError, PasswordDeleteError

from litho.errors import TokenStoreError

logger = logging.getLogger(__name__)


def default_account() -> str:
    return getpass.getuser()


class TokenStore:
    """Secret store with get/set/delete by account name."""

    def __init__(self, service: str):
        self.service = service

    def get(self, account: str) -> str | None:
        try:
            return keyring.get_password(self.service, account)
        except KeyringError as e:
            raise TokenStoreError(f"Cannot read token from keyring: {e}") from e

    def set(self, account: str, value: str) -> None:
        try:
            keyring.set_password(self.service, account, value)
        except KeyringError as e:
            raise TokenStoreError(f"Cannot store token in keyring: {e}") from e

    def delete(self, account: str) -> None:
        try:
            keyring.delete_password(self.service, account)
        except PasswordDeleteError:
            logger.debug(f"No cached token for {account} in {self.service}")
        except KeyringError as e:
            raise TokenStoreError(f"Cannot delete token from keyring: {e}") from e
