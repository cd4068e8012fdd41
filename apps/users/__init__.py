"""Users app package.

Defines the custom user model (``apps.users.models.CustomUser``, the
AUTH_USER_MODEL) carrying the role that every lifecycle manager checks:
customer, admin or provider.
"""
