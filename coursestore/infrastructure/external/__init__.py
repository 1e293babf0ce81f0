"""External integrations: object storage, CDN purge APIs, archives."""
