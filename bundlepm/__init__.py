"""
bundlepm: a small package manager for file bundles published as package lists.
"""

__version__ = "0.1.0"
