"""
Parcel Server — Application Package Initializer
================================================

What:  Marks the `parcel_server` directory as a Python package.
Who:   Used by uvicorn (`parcel_server.main:app`), pytest and the console script.

Architecture Note:
    The backend is split into thin layers:

    ┌─────────────────────────────────────┐
    │     Routes + Guards (API Layer)     │  ← HTTP concerns, authorization
    ├─────────────────────────────────────┤
    │         Services (Domain Logic)     │  ← parcels, payments, users, riders
    ├─────────────────────────────────────┤
    │      Models & Schemas (Records)     │  ← typed documents + API contracts
    ├─────────────────────────────────────┤
    │   DocumentStore / Stripe / Firebase │  ← external collaborators
    └─────────────────────────────────────┘
"""

__version__ = "1.0.0"
