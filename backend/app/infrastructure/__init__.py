"""Infrastructure Layer — store adapters, database sessions, logging setup.

Invariants:
    - Infrastructure implements core Protocols; core never imports infrastructure
    - All driver exceptions mapped to StorageError before leaving this layer

Design Decisions:
    - One adapter per backend (SQL, DynamoDB), selected once in store_factory
"""
