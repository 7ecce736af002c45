"""
Browser form for reward lookups (FastAPI).
"""
