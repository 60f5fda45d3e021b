"""Load word/root relationships from corpus files into a relational store."""

__version__ = "0.1.0"
