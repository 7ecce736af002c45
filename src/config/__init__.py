"""
Configuration loading and validation.

Provides immutable, strongly typed settings objects for the RPC endpoint,
the ABI API, output files and the pool list, validated upfront.
"""
