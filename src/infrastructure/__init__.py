"""
Infrastructure package.

Database persistence, external lookups, event publishing and monitoring.
"""
