"""
Models declared with guises, used only by the tests.
"""
