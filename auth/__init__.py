"""auth/ -- Authentication and authorization package for Storefront.

Credential hashing, request validation policy, session tokens and the
request gate for protected routes.

Layer rule: auth/ imports only stdlib + third-party libraries.
It does NOT import from api/, core/ or catalog/.
api/ imports from auth/, not the other way around.
"""
