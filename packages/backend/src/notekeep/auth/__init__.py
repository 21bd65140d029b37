"""Authentication and ownership gate.

Learn: One authentication path — email/password login issues a signed
JWT access token; every later request presents it as
`Authorization: Bearer <token>`.

The token resolves to an Identity, and that Identity is what every
note query is scoped by. There is no server-side session table and no
revocation: logging out means the client forgets its token.
"""
