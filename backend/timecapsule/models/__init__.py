"""ORM Models — SQLAlchemy declarative models for all domain entities.

Invariants:
    - All models inherit from Base (db/base.py)

Design Decisions:
    - All models imported here so Base.metadata is complete before
      create_all() or alembic autogenerate runs
"""

from timecapsule.models.capsule import Capsule  # noqa: F401
