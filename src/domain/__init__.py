"""
Domain layer for email privacy.

This layer contains:
- Data models (privacy config, masked email result)
- Result types (explicit fallback handling for config loads)
"""
