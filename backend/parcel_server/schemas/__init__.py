"""
Parcel Server — API Schemas
============================

Request bodies and response envelopes (the HTTP contract). Stored entity
records live in `parcel_server.models`.
"""
