"""
Chain - On-chain interaction layer for netpay.

Provides the JSON-RPC client, contract call encoding, transaction signing and
submission, and receipt polling for the staking, token and curation contracts
on Arbitrum One.

Uses httpx + eth-account + eth-abi instead of the heavyweight web3.py.
"""
