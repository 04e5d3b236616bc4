"""
WebPageCheck package.

Polls a list of web pages and reports whether each one is up, in maintenance, or down:
- page_list: page entries (built-in list, JSON page files)
- html_patterns: meta refresh and input tag extraction
- http_client: requests session wrapper
- resolver: per-page resolution loop
- report: terminal report formatting
- cli: command line entry point
"""

__version__ = "1.0.0"
