"""Packaged YAML field schemas, one document per resource type."""
