"""
identity_service.auth

Authentication/authorization primitives.

Responsibilities:
- Signed access tokens (issue, decode, expiry checks).
- One-way password hashing.
- FastAPI dependencies turning a bearer token into a `Principal` and enforcing roles.
"""

# Package marker.


# --- Module Notes -----------------------------------------------------------
# `auth.jwt` and `auth.models` have no dependency on persistence, so any service
# holding the shared signing secret can validate tokens with them alone.
