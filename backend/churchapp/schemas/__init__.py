"""
ChurchApp Backend — Pydantic Request/Response Schemas
=======================================================

What:  The API contract shared with the web, admin and mobile clients.
How:   Request bodies are validated here before any service runs; responses
       are serialized from ORM objects (from_attributes) with camelCase keys.
"""
