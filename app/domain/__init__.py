"""
Domain layer for the commerce back-office ledger.

This layer contains business entities, value objects, and domain logic
following Domain-Driven Design principles.
"""
