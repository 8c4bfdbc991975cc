"""Parsing of provider output."""

from product_comparison.parsing.comparison import ComparisonParser, ComparisonResult


__all__ = ["ComparisonParser", "ComparisonResult"]
