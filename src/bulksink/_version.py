"""
Fallback version module.

Release builds overwrite __version__; editable or source checkouts keep this
default so imports keep working.
"""

__version__ = "0.1.0"
