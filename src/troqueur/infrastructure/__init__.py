"""
Infrastructure layer for Troqueur.
"""
