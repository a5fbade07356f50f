"""
Market-Data Oracle and Arbitrage Scanner.

An asynchronous backend that serves cached reference prices and DEX pair
snapshots, and scans chains and venues for cross-venue arbitrage
opportunities net of gas and bridge costs.
"""

__version__ = "1.0.0"
__author__ = "Tim"
