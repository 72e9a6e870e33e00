"""Notekeeper — personal notes backend.

Users register and log in with email/password, receive a signed bearer
token, and manage notes that only they can read, edit, or delete.
"""

__version__ = "0.1.0"
