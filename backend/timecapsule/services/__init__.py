"""Services Layer — imperative shell around the pure capsule rules.

Invariants:
    - Services do IO (store, clock); rules live in core/
"""
