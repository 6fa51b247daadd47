"""
Chain - On-chain interaction layer.

Provides the JSON-RPC provider, transaction utilities and the batch
transport used to execute encoded batches against a node.

Uses httpx + eth-account + eth-abi instead of the heavyweight web3.py.
"""
