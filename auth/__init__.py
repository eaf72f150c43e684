"""auth/ -- Authentication and authorization package for Bookshelf.

Layer rule: auth/ imports only stdlib + third-party libraries (and fastapi /
starlette request and response types at its edges).
It does NOT import from api/ or books/.
api/ imports from auth/, not the other way around.
"""
