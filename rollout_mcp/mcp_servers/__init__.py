"""MCP server implementations.

Currently only the Kubernetes rollout server under
:mod:`rollout_mcp.mcp_servers.kubernetes`.
"""
