"""
Tuiter Backend — API Routes Package
=====================================

What:  HTTP route handlers that accept requests and return responses.
How:   Each route module handles one resource; handlers stay thin and
       delegate to stores and services.

Route Inventory:
    - users.py:      /api/users, /api/admin, /api/login, /api/register
    - auth.py:       /api/auth/* (session based)
    - tuits.py:      /api/tuits, /api/users/{uid}/tuits
    - relations.py:  likes, dislikes and bookmarks (one router per relation)
    - health.py:     GET /health
"""
