"""HTTP/WebSocket service around a reading session.

WHY: The scraper, overlay, and controls UI are separate collaborators;
this package gives them one documented API to drive the engine through.

HOW: models.py holds the pydantic schemas, app.py the FastAPI factory,
routes, and the uvicorn entry point.

RULES:
- One engine per app instance, created or injected via create_app()
"""
