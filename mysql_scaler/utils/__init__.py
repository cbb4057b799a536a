"""Utility helpers for the MySQL scaler."""
