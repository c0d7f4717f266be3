"""Services Layer — the paginated post repository and the post service.

Invariants:
    - Services depend on core Protocols, never on a concrete store

Design Decisions:
    - Repository (storage mechanics) and service (business rules) kept in separate modules
"""
