"""
Slab Reader CLI
===============
Output formatting for the command line entry point (main.py).
"""
