"""
Tuiter Backend — Services Layer
=================================

What:  Business rules sitting between the routes (HTTP) and the stores
       (persistence).

Service Inventory:
    - annotation: TuitAnnotator, viewer-relative flags for tuit listings
    - accounts:   registration, credential checks and user updates
    - auth:       bcrypt hashing and the session profile helpers
"""
