"""
Encrypted Ethereum key store.

Keys are kept one per file in the standard Web3 Secret Storage format (the
layout used by geth keystores), so a keystore directory created by another
Ethereum tool can be used as-is.
"""
import json
import logging
import os
import stat
import time
from pathlib import Path
from typing import Any, Dict, List, Optional

import portalocker
from eth_account import Account
from eth_account.signers.local import LocalAccount
from web3 import Web3

from .exceptions import KeyStoreError

logger = logging.getLogger(__name__)


def _normalize(address: str) -> str:
    return address.lower().replace("0x", "")


class KeyStore:
    """Thread-safe and process-safe directory of encrypted keys"""

    def __init__(self, store_path: Optional[str] = None):
        """
        Initialize the key store.

        Args:
            store_path: Keystore directory (defaults to HEZ_KEYSTORE_PATH or
                ~/.hermez/keystore)
        """
        if store_path:
            self.store_path = Path(store_path)
        else:
            default_path = os.environ.get(
                "HEZ_KEYSTORE_PATH",
                os.path.expanduser("~/.hermez/keystore")
            )
            self.store_path = Path(default_path)

        self._ensure_dir()

    def _ensure_dir(self):
        """Ensure the keystore directory exists with proper permissions"""
        if not self.store_path.exists():
            self.store_path.mkdir(parents=True, exist_ok=True)

        if os.name == 'posix':
            os.chmod(self.store_path, stat.S_IRUSR | stat.S_IWUSR | stat.S_IXUSR)  # 0700

    def _get_lock_path(self) -> str:
        return str(self.store_path / ".lock")

    def _key_files(self) -> List[Path]:
        return sorted(p for p in self.store_path.iterdir() if p.is_file() and p.name.startswith("UTC--"))

    def _read_key_file(self, path: Path) -> Optional[Dict[str, Any]]:
        try:
            with open(path, 'r') as f:
                return json.load(f)
        except (json.JSONDecodeError, OSError) as e:
            logger.warning(f"Skipping unreadable key file {path.name}: {e}")
            return None

    def accounts(self) -> List[str]:
        """
        List the addresses held in the store.

        Returns:
            Checksummed addresses, in file name order
        """
        addresses = []
        with portalocker.Lock(self._get_lock_path(), timeout=10):
            for path in self._key_files():
                data = self._read_key_file(path)
                if data and "address" in data:
                    addresses.append(Web3.to_checksum_address("0x" + _normalize(data["address"])))
        return addresses

    def has_address(self, address: str) -> bool:
        return _normalize(address) in {_normalize(a) for a in self.accounts()}

    def _find_key(self, address: str) -> Dict[str, Any]:
        wanted = _normalize(address)
        with portalocker.Lock(self._get_lock_path(), timeout=10):
            for path in self._key_files():
                data = self._read_key_file(path)
                if data and _normalize(data.get("address", "")) == wanted:
                    return data
        raise KeyStoreError(f"Keystore doesn't have the key for address {address}")

    def unlock(self, address: str, password: str) -> LocalAccount:
        """
        Decrypt the key of an address.

        Args:
            address: Account address
            password: Keystore password

        Returns:
            Signing account usable for authorized calls

        Raises:
            KeyStoreError: If the key is missing or the password is wrong
        """
        key_json = self._find_key(address)
        try:
            private_key = Account.decrypt(key_json, password)
        except ValueError as e:
            raise KeyStoreError(f"Failed to unlock account {address}: {e}") from e
        account = Account.from_key(private_key)
        logger.info(f"Ethereum account unlocked in the keystore: {account.address}")
        return account

    def import_key(
        self,
        private_key: str,
        password: str,
        kdf: Optional[str] = None,
        iterations: Optional[int] = None
    ) -> str:
        """
        Encrypt a private key and store it.

        Args:
            private_key: Hex private key
            password: Password to encrypt with
            kdf: "scrypt" or "pbkdf2" (defaults to eth-account's choice)
            iterations: KDF work factor (defaults to eth-account's standard)

        Returns:
            Checksummed address of the imported key
        """
        account = Account.from_key(private_key)
        if self.has_address(account.address):
            raise KeyStoreError(f"Account already exists in keystore: {account.address}")

        key_json = Account.encrypt(private_key, password, kdf=kdf, iterations=iterations)
        timestamp = time.strftime("%Y-%m-%dT%H-%M-%S", time.gmtime())
        path = self.store_path / f"UTC--{timestamp}.000000000Z--{_normalize(account.address)}"
        with portalocker.Lock(self._get_lock_path(), timeout=10):
            with open(path, 'w') as f:
                json.dump(key_json, f)
        if os.name == 'posix':
            os.chmod(path, stat.S_IRUSR | stat.S_IWUSR)  # 0600
        logger.info(f"Imported account {account.address} into keystore")
        return account.address
