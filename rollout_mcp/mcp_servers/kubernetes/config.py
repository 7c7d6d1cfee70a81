from __future__ import annotations

from dataclasses import dataclass
from typing import Optional

from rollout_mcp.config_utils import env_choice, env_int, env_optional_str, env_str


@dataclass(frozen=True)
class KubernetesMCPServerConfig:
    """Runtime configuration for the Kubernetes rollout MCP server.

    Env vars:
    - K8S_KUBECONFIG: path to kubeconfig file
    - K8S_CONTEXT: kube context name
    - K8S_NAMESPACE: namespace used when a tool call leaves it empty

    If kubeconfig and context are unset, the client uses in-cluster config when
    running in a pod and default kubeconfig loading rules otherwise.

    MCP transport selection:
    - KUBERNETES_MCP_TRANSPORT: stdio|http|sse
    - KUBERNETES_MCP_HOST
    - KUBERNETES_MCP_PORT
    - KUBERNETES_MCP_CLIENT_TOKEN: when set, tool calls must pass it as `client_token`
    - KUBERNETES_MCP_LOG_LEVEL: DEBUG|INFO|WARNING|ERROR
    """

    kubeconfig: Optional[str]
    context: Optional[str]
    namespace: str
    mcp_transport: str
    mcp_host: str
    mcp_port: int
    client_token: Optional[str]
    log_level: str

    DEFAULT_NAMESPACE: str = "default"
    DEFAULT_MCP_TRANSPORT: str = "stdio"
    DEFAULT_MCP_HOST: str = "0.0.0.0"
    DEFAULT_MCP_PORT: int = 8000
    DEFAULT_LOG_LEVEL: str = "INFO"

    @classmethod
    def from_env(cls) -> "KubernetesMCPServerConfig":
        return cls(
            kubeconfig=env_optional_str("K8S_KUBECONFIG"),
            context=env_optional_str("K8S_CONTEXT"),
            namespace=env_optional_str("K8S_NAMESPACE") or cls.DEFAULT_NAMESPACE,
            mcp_transport=env_choice("KUBERNETES_MCP_TRANSPORT", cls.DEFAULT_MCP_TRANSPORT, ("stdio", "http", "sse")),
            mcp_host=env_str("KUBERNETES_MCP_HOST", cls.DEFAULT_MCP_HOST),
            mcp_port=env_int("KUBERNETES_MCP_PORT", cls.DEFAULT_MCP_PORT),
            client_token=env_optional_str("KUBERNETES_MCP_CLIENT_TOKEN"),
            log_level=env_choice(
                "KUBERNETES_MCP_LOG_LEVEL", cls.DEFAULT_LOG_LEVEL, ("DEBUG", "INFO", "WARNING", "ERROR")
            ).upper(),
        )
