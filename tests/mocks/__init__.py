"""
Centralized mock objects for testing.

Factories for WebSocket connections and in-memory domain services, shared
by unit and end-to-end tests.
"""
