# Search package for the weighbox engine
"""
Decision tree search.

Provides the pruned backtracking builder and the bounded composition
enumeration it draws pan assignments from.
"""
