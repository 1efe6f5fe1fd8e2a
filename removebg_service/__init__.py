"""
remove.bg proxy service package.

Exposes the request intake, the background-removal gateway around the
remove.bg API, the session collaborators, and the FastAPI application.
"""
