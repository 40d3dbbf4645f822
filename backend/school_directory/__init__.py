"""School directory backend package.

This package contains the registration and retrieval core of a small
directory of schools: clients register an institution with its contact
details and one image, and later browse, search and sort the directory.

- Validates untrusted multipart submissions before any side effect
- Stores school images on the filesystem under their upload filename
- Records schools in a single relational table through one shared,
  lazily opened connection
- Lists schools with in-memory search and locale-aware sorting

See module docstrings for details on each component.
"""
