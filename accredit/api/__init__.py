"""ACCREDIT HTTP API - FastAPI app, auth and request models."""
