"""Bundled data loaders."""
