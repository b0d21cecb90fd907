"""
Tools for compiling the Unicode Character Database into static tables.
"""
