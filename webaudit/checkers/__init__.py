"""
Rule checkers.

Contains:
- HeaderChecker - security headers против таблицы политик
- CookieChecker - атрибуты Secure/HttpOnly/SameSite и чувствительные данные
- StorageChecker - чувствительные данные в localStorage/sessionStorage
- ConsoleLeakDetector - утечки через console.*
"""

from .console_leak import ConsoleLeakDetector, LeakDetectingHandler, LogInterceptor
from .cookie_checker import CookieChecker
from .header_checker import HeaderChecker
from .storage_checker import StorageChecker

__all__ = [
    "ConsoleLeakDetector",
    "CookieChecker",
    "HeaderChecker",
    "LeakDetectingHandler",
    "LogInterceptor",
    "StorageChecker",
]
