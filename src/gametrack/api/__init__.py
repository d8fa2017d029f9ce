"""API module for gametrack.

- Validates inputs, reads/writes DB through repo
- Maps domain outcomes to HTTP status codes
- Forbidden: aggregation logic
"""
