"""Helpers shared by routers and middleware."""
