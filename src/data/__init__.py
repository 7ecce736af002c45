"""
Data contracts and file I/O.

Defines pool/result types and the results CSV schema, and handles the
self-migrating results CSV and the contract ABI cache.
"""
