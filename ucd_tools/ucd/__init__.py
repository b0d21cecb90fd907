"""
Retrieval and parsing of Unicode Character Database files.
"""
