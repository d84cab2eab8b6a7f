"""Domain layer for the Issue Vitality engine.

Holds the pure scoring and escalation rules, the domain models, events and
errors. Nothing in this package performs I/O.
"""
