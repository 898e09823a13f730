"""
Data models: domain dataclasses and API (pydantic) models
"""
