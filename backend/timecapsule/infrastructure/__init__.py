"""Infrastructure Layer — database, clock, identity and logging adapters.

Invariants:
    - Infrastructure never imports domain rules from core/ (only errors and types)
    - All database failures mapped to DatabaseError
"""
