"""User accounts, notification preferences, and password reset tokens."""
