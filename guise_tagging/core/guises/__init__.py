"""
Guises: named roles that model instances can take on.
"""
