"""auth/ -- Authentication and authorization package for Chirpy.

Layer rule: auth/ imports only stdlib + third-party libraries, plus core/
(the configuration kernel). It does NOT import from api/ or chirps/.
api/ and chirps/ import from auth/, not the other way around.
"""
