"""
Saltware site backend: content collections, admin dashboard and access gate
"""

__version__ = "1.0.0"
