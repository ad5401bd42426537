"""Routing: method-name conventions, URI composition, and the route table.

Routes are derived from controller files at startup and compiled into
immutable per-controller routers when the app freezes.
"""
