"""Authentication and authorization.

Learn: One authentication path — users trade email/password for a
short-lived JWT access token, then present it as a Bearer token.
Every protected route resolves that token to a CurrentIdentity
before any handler runs; handlers scope their queries by its user_id.
"""
