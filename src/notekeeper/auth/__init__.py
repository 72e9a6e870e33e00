"""Authentication and authorization.

Learn: Users authenticate with email/password and receive a bearer JWT
valid for 7 days. Every note route runs the access gate in
dependencies.py, which turns "Authorization: Bearer <token>" into a
CurrentIdentity. Ownership of individual notes is checked later by
NoteOwnershipGuard in services/note_service.py.
"""
