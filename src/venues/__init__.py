"""
Adapters for external collaborators.

Defines the contract-call protocol and concrete clients for the JSON-RPC
endpoint (web3.py) and the Arbiscan ABI API (requests).
"""
