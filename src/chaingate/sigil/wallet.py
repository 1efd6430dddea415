"""
ECDSA / secp256k1 wallet helpers.

Keys are returned to the caller as WalletMaterial and never persisted here.

Dependencies: eth-account (signing, BIP-39/BIP-44 derivation), eth-hash
(Keccak-256 for EIP-55 checksums)
"""

from __future__ import annotations

import re
import secrets
from dataclasses import dataclass

from eth_account import Account
from eth_account.hdaccount.mnemonic import Mnemonic
from eth_account.messages import encode_defunct
from eth_account.signers.local import LocalAccount
from eth_hash.auto import keccak

Account.enable_unaudited_hdwallet_features()

DEFAULT_DERIVATION_PATH = "m/44'/60'/0'/0/0"
MNEMONIC_ENTROPY_BYTES = 16

_HEX_ADDRESS = re.compile(r"^0x[0-9a-fA-F]{40}$")


@dataclass(frozen=True)
class WalletMaterial:
    address: str
    private_key: str

    def __repr__(self) -> str:
        return f"WalletMaterial(address={self.address!r}, private_key=<redacted>)"


def _material(account: LocalAccount) -> WalletMaterial:
    return WalletMaterial(
        address=account.address,
        private_key="0x" + bytes(account.key).hex(),
    )


def generate_random_wallet() -> WalletMaterial:
    """
    Generate a new ECDSA/secp256k1 keypair (EOA).

    Returns:
        WalletMaterial with a checksummed address and 0x-prefixed private key
    """
    private_key = "0x" + secrets.token_hex(32)
    return _material(Account.from_key(private_key))


def generate_wallet_from_seed(
    mnemonic: str,
    passphrase: str = "",
    account_path: str = DEFAULT_DERIVATION_PATH,
) -> WalletMaterial:
    """
    Derive a wallet from a BIP-39 mnemonic.

    Args:
        mnemonic: Space separated seed phrase
        passphrase: Optional BIP-39 passphrase
        account_path: BIP-44 derivation path

    Returns:
        WalletMaterial for the derived account
    """
    account = Account.from_mnemonic(
        mnemonic, passphrase=passphrase, account_path=account_path
    )
    return _material(account)


def import_wallet_from_private_key(private_key: str) -> WalletMaterial:
    if not private_key.startswith("0x"):
        private_key = "0x" + private_key
    return _material(Account.from_key(private_key))


def generate_mnemonic() -> str:
    """Generate a 12-word English mnemonic from 128 bits of secure randomness."""
    entropy = secrets.token_bytes(MNEMONIC_ENTROPY_BYTES)
    return Mnemonic().to_mnemonic(entropy)


def to_checksum_address(address: str) -> str:
    """Convert an address to EIP-55 checksummed format."""
    if not _HEX_ADDRESS.match(address):
        raise ValueError(f"Not a 20-byte hex address: {address!r}")
    addr = address[2:].lower()
    addr_hash = keccak(addr.encode("utf-8")).hex()
    result = "0x"
    for i, c in enumerate(addr):
        if c in "abcdef":
            result += c.upper() if int(addr_hash[i], 16) >= 8 else c
        else:
            result += c
    return result


def is_valid_address(address: str) -> bool:
    """
    Check whether a string is a well-formed address.

    All-lowercase and all-uppercase hex carry no checksum and are accepted;
    mixed case must match the EIP-55 checksum exactly.
    """
    if not isinstance(address, str) or not _HEX_ADDRESS.match(address):
        return False
    body = address[2:]
    if body == body.lower() or body == body.upper():
        return True
    return to_checksum_address(address) == address


def get_account(private_key: str) -> LocalAccount:
    """Get an eth-account LocalAccount for signing transactions."""
    return Account.from_key(private_key)


def sign_message(private_key: str, message: str) -> str:
    """
    Sign a message using EIP-191 personal_sign.

    Returns:
        0x-prefixed hex signature (65 bytes: r + s + v)
    """
    signable = encode_defunct(text=message)
    signed = get_account(private_key).sign_message(signable)
    return "0x" + bytes(signed.signature).hex()


def verify_signed_message(message: str, signature: str) -> str:
    """Recover the checksummed address that produced an EIP-191 signature."""
    signable = encode_defunct(text=message)
    return Account.recover_message(signable, signature=signature)
