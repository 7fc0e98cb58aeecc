"""
Configuration management for cv-store.

Contains the Pydantic settings shared by the storage adapters, the CLI and
the signing backend.
"""
