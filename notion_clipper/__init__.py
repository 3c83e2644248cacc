"""Clip web page selections into a Notion page hierarchy."""

__version__ = "0.3.0"
