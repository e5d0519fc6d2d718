"""
playgate - Google sign-in and Google Play purchase verification endpoints.
"""

__version__ = "0.1.0"
