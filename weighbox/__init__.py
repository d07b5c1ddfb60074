# weighbox - Weighing Strategy Search Engine

"""
Finds weighing strategies for the defective-item balance puzzle.

Given n products, one of which is lighter or heavier than the rest, and a
budget of k weighings on a two-pan balance, the engine searches for a
decision tree that names the defective product and its direction.
"""
