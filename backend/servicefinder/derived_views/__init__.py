"""Derived views: read-only shapes for UI consumption.

Views add display fields (labels, formatted ratings) on top of stored data
and never expose password hashes or session tokens.
"""
