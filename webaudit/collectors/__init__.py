"""
Artifact collectors.

Contains:
- HttpCollector - заголовки и cookies живой страницы через httpx
"""

from .http_collector import HttpCollector, parse_set_cookie

__all__ = ["HttpCollector", "parse_set_cookie"]
