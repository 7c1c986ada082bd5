"""
NegotiateAI Backend - Pydantic Schemas
=======================================

API contracts between the browser extension and the backend. Kept separate
from the SQLAlchemy models so the wire format (camelCase keys, public
fields only) can change independently of the table layout.
"""
