"""Middleware applied to every request.

Registration order in ``create_app`` makes them run, outermost first, as:

1. CORS
2. Security headers
3. Request context (correlation and request IDs)
4. Request logging
"""
