"""Registry -- the catalog of application registrations.

The registry provides:
- Storage: register, import and delete entries keyed by (name, type)
- Discovery: paginated listing filtered by type and name substring
- Details: configuration metadata resolved per entry
- Prefetch: background warming of metadata artifacts after registration
"""
