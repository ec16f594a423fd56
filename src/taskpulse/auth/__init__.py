"""Authentication and authorization.

Learn: Users log in with email/password and receive a JWT that carries
their id, email, role, workspace and job title. Every protected route
resolves that token into a CurrentIdentity, which the services use for
tenant scoping. The identity is never re-read from the database.
"""
