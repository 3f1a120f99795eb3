"""Raid Ledger - guild event planning API"""

__version__ = "1.0.0"
