"""
odata_client.api - Optional REST API Gateway
=============================================

A FastAPI gateway that compiles structured query requests into OData URLs
and runs them against the configured API.

Usage
-----
>>> from odata_client.api import create_app
>>> app = create_app()
>>> # Run with: uvicorn odata_client.api:app

Or run directly:
>>> python -m odata_client.api

"""

from pathlib import Path

from dotenv import load_dotenv

# Load .env before creating the app
env_path = Path.cwd() / ".env"
if env_path.exists():
    load_dotenv(env_path)

from odata_client.api.gateway import ODataGateway, build_query, create_app

# Create default app instance for uvicorn
app = create_app()

__all__ = [
    "create_app",
    "build_query",
    "ODataGateway",
    "app",
]
