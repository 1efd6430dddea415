"""
Pneuma - On-chain interaction layer for chaingate.

Endpoint resolution, JSON-RPC reads, ABI dispatch, transaction signing and
submission, sequential enumeration and event polling.

Uses httpx + eth-account + eth-abi instead of the heavyweight web3.py.
"""
