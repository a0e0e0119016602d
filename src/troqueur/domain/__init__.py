"""
Troqueur domain layer.
"""
