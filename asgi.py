"""
asgi.py -- Application assembly for fintrack.

The only module that imports from both api/ and web/. api/main.py knows
nothing about the HTML pages; web/routes.py knows nothing about the JSON API.

Run with:  uvicorn asgi:app --reload
"""

from api.main import app
from web.routes import router as web_router

app.include_router(web_router, tags=["Web UI"])
