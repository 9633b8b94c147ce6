"""Vendor request/response schemas."""
