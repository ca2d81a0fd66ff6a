"""Pydantic schemas: the contract between the core and its collaborators."""
