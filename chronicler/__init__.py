"""Chronicler - generation pipeline and narrative binding engine for historical timelines"""

__version__ = "0.1.0"
