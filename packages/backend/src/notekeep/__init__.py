"""Notekeep — personal note-taking service.

Clients register, log in for a bearer token, and keep short text notes
that only they can see. Every note query is scoped to the identity the
token resolves to.
"""

__version__ = "0.1.0"
