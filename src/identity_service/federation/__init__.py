"""
identity_service.federation

Third-party identity provider clients.

Responsibilities:
- Drive the OAuth2 authorization-code flow against an external provider.
- Turn the provider's userinfo into a `FederatedIdentity` assertion.
"""

# Package marker.
