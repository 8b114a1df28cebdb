# remarkscope/__init__.py
"""Diff and count structured compiler remarks."""

__version__ = "0.3.0"
