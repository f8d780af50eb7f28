"""
Tuiter Backend — Middleware Package
=====================================

Middleware Chain (request direction):
    Request → [Session] → [Request ID] → [Logging] → [GZip] → [CORS] → Route Handler

    1. Session: decodes the signed cookie into ``request.session``
    2. Request ID: correlation ID for logs and error bodies
    3. Logging: access line with status and duration
    4. GZip / CORS: Starlette built-ins configured in main.py
"""
