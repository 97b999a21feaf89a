"""
Cache service package for the blog platform.

A read-only HTTP mirror of the post listing and detail endpoints. It reads
the same PostgreSQL store as the posts API through its own Redis instance,
using the identical cache key policy, and exposes purge endpoints for
operators.

- app.main: API surface for cached reads, purges, stats and health.

Guidelines:
- The service never writes posts; entries expire by TTL or are purged.
- Cache failures degrade to reading the store directly.
"""
