"""
Guise Tagging: role tags for Django models.
"""
__version__ = "0.4.0"
