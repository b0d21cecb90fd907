"""
Core utilities that are used by multiple other modules/packages in ucd_tools.
"""
