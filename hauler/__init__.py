"""Collect files, directories, HTTP content and in-memory blobs into a local OCI image layout store."""

__version__ = "0.1.0"