"""
Infrastructure Module

Cache backends and the value codec.
"""
