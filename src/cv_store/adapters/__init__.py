"""
Adapter layer for cv-store.

Contains the storage backends (local SQLite, direct S3, presigned S3). Each one
implements the same four CV operations so the storage facade can pick any of
them from configuration.
"""
