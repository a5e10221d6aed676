"""TimeCapsule — time-locked, code-guarded messages that retire after a retention window."""

__version__ = "1.0.0"
