"""MCP tool implementations: plain functions returning user-facing strings."""
