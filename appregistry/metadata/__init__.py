"""Metadata -- configuration properties described by application metadata artifacts."""
