"""Restricted regular-expression matching for a grep-like line filter."""

from .compiler import PatternError, RegexParser, compile
from .matcher import BacktrackingMatcher, is_match, search

__all__ = [
    "BacktrackingMatcher",
    "PatternError",
    "RegexParser",
    "compile",
    "is_match",
    "search",
]
