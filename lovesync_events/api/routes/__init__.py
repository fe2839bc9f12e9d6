"""API routers, one per invocation mode."""
