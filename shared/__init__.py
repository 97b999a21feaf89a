"""
Shared utilities for the blog posts platform.

This package aggregates common building blocks consumed by all services:

- config: Service configuration via pydantic-settings
- logging: Structured logging with request correlation
- metrics: Prometheus metrics helpers
- errors: Canonical error types and the response envelope
- models: Post and user models shared by the services
- cache_aside: Cache-aside reader and cache key policy
- redis_cache: Redis-backed cache adapter
- persistence: PostgreSQL-backed store for posts and users
- posts: Cached read path for post listings and details

Any cross-service logic should live here to avoid import cycles across
service packages. Do not import from service_* packages into shared/.
"""
