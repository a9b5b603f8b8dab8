"""Inventory domain model, snapshot codec, and registry."""
