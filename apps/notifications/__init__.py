"""Notifications app: in-app and email messages about lifecycle changes."""
