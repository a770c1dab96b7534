"""
shellenv — load and validate development-shell descriptors.
"""

__version__ = "0.1.0"
