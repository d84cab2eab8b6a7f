"""HTTP API for the Issue Vitality engine."""
