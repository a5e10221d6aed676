"""Core Layer — pure capsule lifecycle rules, no IO, no async, no DB.

Invariants:
    - No module in core/ imports from services/, api/, infrastructure/, or db/
    - All functions are pure and deterministic given an explicit `now`

Design Decisions:
    - Functional core separated from imperative shell
"""
