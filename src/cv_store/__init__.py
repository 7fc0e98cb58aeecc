"""cv-store: keep CV files on local SQLite storage or in an S3 bucket."""

__version__ = "0.1.0"
