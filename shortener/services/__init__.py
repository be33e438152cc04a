"""
Services module for business logic separation.

This module contains service classes that encapsulate the short-code
lifecycle, keeping it separate from API endpoints and store backends.
"""
