"""
Issue Vitality & Escalation Engine

Scores citizen-reported issues from their community ratings, tracks the
share of a ward that supports each issue, and escalates issues through
local, state and national attention tiers as support grows.

Engine guarantees:
- Per-issue recomputation is serialized; different issues never contend
- Escalation tiers only move upward
- Each tier transition produces exactly one status record
"""

__version__ = "0.1.0"
__all__ = ["__version__"]
