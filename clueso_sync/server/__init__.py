"""HTTP API for the narration timing core.

WHY: The editor back end and front end call estimation, layout, and
export over HTTP.

HOW: app.py defines the FastAPI routes, models.py the Pydantic schemas.

RULES:
- The API is stateless; every request carries its slides
"""
