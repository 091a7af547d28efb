"""Catalog service: write-through book catalog with token authentication and permission bitmasks."""
