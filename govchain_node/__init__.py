"""
GovChain Node package initializer

Keep this module lightweight. Do not import the API or executor here, so
that runtimes can be used (and tested) without FastAPI being loaded.
"""

__all__ = []
__version__ = "0.1.0"
