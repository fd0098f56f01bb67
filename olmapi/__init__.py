"""Data types and helpers for Operator Lifecycle Manager resources and validation results."""

__version__ = "0.1.0"