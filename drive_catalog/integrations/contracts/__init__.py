"""
Contracts (data models).

Defines the shapes exchanged with external integrations:
- folder and file references produced by the Drive listing
- the assembled catalog document (categories, subfolders, products)
- abstract provider interfaces for listing, content fetch, CDN upload and cache

Both mock and real HTTP clients implement these interfaces, so the catalog
core never depends on a concrete provider.
"""
