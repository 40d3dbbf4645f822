"""Validation, image storage and directory workflows."""
