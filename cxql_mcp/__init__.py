"""MCP server exposing the CXQL tooling."""
