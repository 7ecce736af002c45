"""
Generic utility functions shared across modules.

Includes the reward value normalizer, clock abstractions for CSV timestamps,
and logging setup for entry points.
"""
