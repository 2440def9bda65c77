"""
services: configuration / authentication lifecycle and token refresh.

Every operation returns a ``Result`` (``Ok`` or ``Err``) instead of raising;
the HTTP layer maps ``Err.kind`` to a status code.
"""
