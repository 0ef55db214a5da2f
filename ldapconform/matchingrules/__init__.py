"""Matching rules used to normalize and compare attribute values."""
