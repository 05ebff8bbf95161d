"""Luna: persona chat backend with model tool calling and persisted sessions."""
__version__ = "1.0.0"
