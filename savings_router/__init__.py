"""
Savings Router Module.

This module provides functionality for building point-to-point routes over a
weighted graph using all-pairs Dijkstra preprocessing and a randomized
Clarke-Wright savings heuristic.
"""

__version__ = '0.1.0'
