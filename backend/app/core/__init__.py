"""
Core package — cross-cutting concerns.

Modules:
    config          — environment variables & settings
    logging_config  — structured JSON logging
    errors          — exception hierarchy & handlers
    middleware      — request ID and access logging
    health          — health check aggregation
"""
