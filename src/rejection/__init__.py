"""Rejection therapy challenge API."""
