"""
Utility modules for core functionality - functional architecture.

Modules:
- decorators: Utility context managers (stage timing)
"""

from .decorators import timer

__all__ = ["timer"]
