"""API router subpackage for the school directory backend.

Submodules:
    - schools: Endpoints for registering and listing schools.

Routers are composed into the application in school_directory.main.
"""
