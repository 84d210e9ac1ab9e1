"""movieapi — movie catalogue HTTP API.

Accounts sign up and sign in for a short-lived JWT, then use it to
create, read, update, and delete movie records.
"""

__version__ = "0.1.0"
