"""
Posts API service package for the blog platform.

This package exposes the FastAPI application for accounts and post CRUD:

- app.main: Application entrypoint that wires routes and lifecycle.
- app.auth: Bearer token issuance/verification, password hashing and
  account operations (register, login, profile).
- app.posts: Post handler that serves reads through the cache-aside reader
  and invalidates cached entries on every write.
- app.schemas: Request bodies accepted by the API.

Design notes:
- Store and cache clients are constructed once per service instance and
  injected into the handlers; nothing is held in module globals.
- Use the shared/ utilities for logging, metrics, errors and caching.
"""
