"""MCP server for Shopify store sync."""
