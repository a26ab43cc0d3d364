"""
identity_service.api

HTTP boundary for the identity service.

Responsibilities:
- FastAPI app factory and router modules.
- API-layer dependency wiring, request/response models and error translation.
"""

# Package marker.


# --- Module Notes -----------------------------------------------------------
# The API layer should remain thin: request validation + auth + delegation to services.
