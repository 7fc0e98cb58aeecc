"""boto3 helpers used by the signing backend."""
