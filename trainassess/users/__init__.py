"""Accounts, registration and login."""
