"""Kubernetes rollout control exposed as MCP tools for automated agents."""

__version__ = "0.1.0"
