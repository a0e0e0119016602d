"""
Troqueur application layer.
"""
