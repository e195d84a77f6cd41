"""
Utilities and test-only apps for the guise tagging tests.
"""
