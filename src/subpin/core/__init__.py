"""Core subpin logic: manifests, git access, module operations and sync."""
