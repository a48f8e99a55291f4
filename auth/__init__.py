"""auth/ -- Registration, login, and session guard for the bookstore API.

Layer rule: auth/ imports only stdlib, third-party libraries, and core/.
It does NOT import from api/ or books/.
api/ imports from auth/, not the other way around.
"""
