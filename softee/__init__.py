"""Softee: soft staking for non-fungible collections."""

__version__ = "0.1.0"
