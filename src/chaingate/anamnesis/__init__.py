"""
Anamnesis - Content-addressed storage for chaingate.

Thin helpers over the IPFS (Kubo) HTTP RPC API.
"""
