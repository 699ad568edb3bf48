"""
Analytics on top of the financial core: sensitivity (tornado) analysis and
project config loading/validation.
"""
