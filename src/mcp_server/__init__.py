"""MCP server exposing the Tavily tools."""
