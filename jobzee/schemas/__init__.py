"""
Schemas module - Request/Response schemas for API endpoints.

Schemas are the API contract (what the client sends/receives); stored
documents live in MongoDB and are serialized by jobzee.services.mongo_service.
"""
