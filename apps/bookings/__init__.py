"""Bookings app: short rides (wedding, airport, cargo, daily hire)."""
