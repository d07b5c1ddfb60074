# CLI package for weighbox
"""
Command-line interface for running weighing strategy searches.

Commands:
    weighbox solve   - Search, verify and save a decision tree
    weighbox verify  - Check a saved tree against every case
"""
