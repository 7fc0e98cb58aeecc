"""
Signing backend for cv-store.

A small FastAPI service that holds the AWS credentials and hands out
short-lived signed URLs, lists the CV prefix and deletes objects on behalf of
the presigned storage backend.
"""
