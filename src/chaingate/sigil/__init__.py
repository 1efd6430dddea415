"""
Sigil - Local key material for chaingate.

Wallet generation, mnemonic derivation, EIP-191 signing and signer recovery.
Nothing in this package touches the network or the filesystem.
"""
