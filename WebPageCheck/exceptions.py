"""
Custom exception classes for WebPageCheck.

Transport problems end up as DOWN verdicts; configuration problems abort the run.
"""

from __future__ import annotations


class WebPageCheckError(Exception):
    """Base exception for all WebPageCheck errors"""
    pass


class ConfigurationError(WebPageCheckError):
    """Configuration, environment variable or page list errors"""
    pass


class FetchError(WebPageCheckError):
    """Network/transport failures while fetching a page"""

    def __init__(self, message: str, *, url: str = "") -> None:
        super().__init__(message)
        self.url = url
