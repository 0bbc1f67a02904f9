"""
Lockbox is the high-level client for locking bundles. Lower-level functions are
available in `lockclient`.
"""

from .core import Lockbox

__all__ = ["Lockbox"]
