"""StreamFlix - movie/TV discovery and streaming redirect service"""

__version__ = "1.0.0"
