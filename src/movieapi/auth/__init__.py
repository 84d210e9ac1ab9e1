"""Authentication.

Learn: Accounts sign in with username/password and receive a JWT.
Every movie route requires that token in an "Authorization: JWT <token>"
header; verification is stateless (signature + expiry).
"""
