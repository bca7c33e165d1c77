"""Google Drive product images for Tiendanube catalogs."""

__version__ = "0.1.0"
