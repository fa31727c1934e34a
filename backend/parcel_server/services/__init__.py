# Services package init
"""
Parcel Server — Services Layer
===============================

What:  Domain logic between the routes (HTTP) and the document store.
How:   Each service is a stateless class with a module-level singleton. Every
       store-backed method takes the DocumentStore as its first argument, so
       tests can hand in an in-memory double.

Service Inventory:
    - ParcelService:   booking CRUD over `parcels`
    - PaymentService:  payment history and confirmation (two-step write)
    - UserService:     registration, search, role lookup and assignment
    - RiderService:    applications, listings and activation
    - PaymentGateway:  Stripe payment intents (app.state.payment_gateway)
    - IdentityVerifier: Firebase ID-token verification (app.state.identity_verifier)
"""
