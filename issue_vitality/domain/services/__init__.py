"""Pure domain services: scoring and escalation rules."""
