"""
stakevault: single-asset staking vault with pro-rata rewards in a second asset
"""

__version__ = "0.1.0"
