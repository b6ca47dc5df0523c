"""
Block Dodger: dodge (or shoot down) the falling blocks.
"""

__version__ = "0.1.0"
