"""Selector normalizers."""

from .selectors import Selector, normalize_selectors

__all__ = ["Selector", "normalize_selectors"]
