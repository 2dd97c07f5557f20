"""Cookie-based identity.

The user name given at login is remembered in Starlette's signed session
cookie and read back on every request.
"""
