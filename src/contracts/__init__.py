"""
Contract ABI model.

Parses ABI JSON into typed functions and parameters and handles per-type
validation and formatting of user-entered call arguments.
"""
