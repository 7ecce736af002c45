"""
Query workflows.

Coordinates sequential contract calls over the configured pools, generic
batch calls for the CLI, and ABI resolution (cache, then block explorer).
"""
