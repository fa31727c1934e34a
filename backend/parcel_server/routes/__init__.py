# Routes package init
"""
Parcel Server — API Routes Package
===================================

Route Inventory:
    - root.py:      GET  /                       (plain-text liveness)
    - health.py:    GET  /health                 (dependency health)
    - parcels.py:   GET/POST /parcels, GET/DELETE /parcels/{id}
    - payments.py:  GET/POST /payments, POST /create-payment-intent
    - users.py:     POST /users, GET /users/search,
                    PATCH /users/{id}/role, GET /users/{email}/role
    - riders.py:    POST /riders, GET /riders/{pending,active,available},
                    PATCH /riders/{id}

Design Principle:
    Routes are THIN. They declare inputs and guards, call one service
    method, and return its result. Status codes for errors come from the
    global exception handlers in main.py.
"""
