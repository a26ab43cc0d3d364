"""
identity_service.services

Service layer package.

Responsibilities:
- Own business workflows and transaction boundaries (register, authenticate,
  link a federated identity, replace roles).
"""

# Package marker.


# --- Module Notes -----------------------------------------------------------
# Expected business outcomes come back as `services.results` values; only faults
# (`services.errors`) are raised.
