"""Grocery list aggregation and partner checkout for meal plans."""

__version__ = "0.1.0"
