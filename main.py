"""
Entry point for the insurance contract client.
Run with: uvicorn main:app --reload
"""
from insurance_client.main import app

__all__ = ["app"]
