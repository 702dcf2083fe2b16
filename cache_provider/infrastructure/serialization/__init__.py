"""
Serialization Module

Object-to-text codec used to persist cached values and freshness envelopes.
"""

from .json_codec import decode, encode

__all__ = [
    "decode",
    "encode",
]
