"""
Building, emitting, and verifying the tables that are compiled from the Unicode Character Database.
"""
