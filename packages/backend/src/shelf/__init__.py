"""Shelf — bookmark service with stateless bearer-token auth.

Users sign up with email/password, receive a short-lived signed access
token, and use it to manage their own bookmarks.
"""

__version__ = "0.1.0"
