"""
WebFinger Models

This package defines the data structures served by finger.

Key Models:
- webfinger.py: The Link and WebFinger models and the type aliases for raw definitions

Models are Pydantic models frozen after construction. The index built at startup is shared by
every request handler and is never mutated, so no locking is required to read it.
"""
