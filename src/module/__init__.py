"""Local module records: identity, installed metadata, status and sync."""
