"""Finances app: booking payments, the manual ledger and financial reports."""
