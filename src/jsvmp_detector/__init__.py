"""JSVMP detector: LLM-assisted location of JavaScript VM dispatchers."""

__version__ = "0.1.0"
