"""
HTTP routers (presentation interface for the site UI)
"""
