"""
Request middleware: session tokens and auth dependencies
"""
