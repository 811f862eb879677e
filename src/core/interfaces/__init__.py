"""Core interfaces.

Structural contracts (Protocol) implemented by concrete adapters, so the
pipeline depends on abstractions and tests can hand in fakes.
"""
