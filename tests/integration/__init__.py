"""Integration tests for the HTTP API.

Drives the real FastAPI app through httpx's ASGITransport with the fake
gateway injected via create_app(service=...).
"""
