"""Request handling: ASGI adapter, controller lifecycle, error path, dev server."""
