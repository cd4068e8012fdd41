"""Rentals app: long-term vehicle rental contracts."""
