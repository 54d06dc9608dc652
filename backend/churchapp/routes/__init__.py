"""
ChurchApp Backend — API Routes Package
========================================

Route Inventory:
    - auth.py:          /auth/login, /auth/me
    - admin.py:         /admin/auth/login, /admin/auth/me, /admin/users, /admin/churches
    - churches.py:      /churches
    - branches.py:      /branches, /branches/branches
    - members.py:       /members
    - permissions.py:   /permissions
    - positions.py:     /positions
    - finances.py:      /finances
    - events.py:        /events
    - contributions.py: /contributions
    - devotionals.py:   /devotionals
    - uploads.py:       /upload/*, /uploads/avatars/{name}
    - health.py:        /health

Routes stay thin: resolve the principal through dependencies, call one
service, return the schema. Status codes for failures come from the
exception handlers in main.py.
"""
