from __future__ import annotations

import logging
from time import perf_counter
from typing import Any, Dict, Optional, Union

from fastmcp import FastMCP

from .config import KubernetesMCPServerConfig
from .utils.clients import KubernetesClientSet, load_clients
from .utils.cluster import health_check as health_check_impl
from .utils.errors import RolloutError
from .utils.orchestration import KubernetesOrchestrationClient
from .utils.rollout import RolloutController

logger = logging.getLogger(__name__)


def _auth_or_error(expected: Optional[str], client_token: Optional[str]) -> Optional[Dict[str, Any]]:
    """Validate the caller's token; tools stay open when none is configured."""

    if not expected:
        return None
    if client_token != expected:
        return {"ok": False, "error": "unauthorized", "hint": "Invalid or missing client token."}
    return None


def rollout_impl(
    controller: RolloutController,
    action: str,
    resource_type: str,
    resource_name: str,
    namespace: Optional[str] = None,
    revision: Optional[Union[int, str]] = None,
) -> Dict[str, Any]:
    started = perf_counter()
    logger.debug(
        "tool call: rollout action=%s resource_type=%s resource_name=%s namespace=%s revision=%s",
        action,
        resource_type,
        resource_name,
        namespace,
        revision,
    )
    try:
        result = controller.execute(namespace, resource_type, resource_name, action, revision)
    except RolloutError as exc:
        logger.error("tool call: rollout failed after %dms: %s", int((perf_counter() - started) * 1000), exc)
        return exc.to_dict()

    logger.info(
        "tool call: rollout %s %s completed in %dms",
        result.action,
        f"{result.kind.lower()}/{result.name}",
        int((perf_counter() - started) * 1000),
    )
    return result.to_dict()


def create_server(
    cfg: KubernetesMCPServerConfig,
    controller: RolloutController,
    clients: Optional[KubernetesClientSet] = None,
) -> FastMCP:
    """Build the MCP server around an already constructed controller."""

    mcp = FastMCP("kubernetes-rollout-mcp")

    @mcp.tool
    def rollout(
        action: str,
        resource_type: str,
        resource_name: str,
        namespace: Optional[str] = None,
        revision: Optional[Union[int, str]] = None,
        client_token: Optional[str] = None,
    ) -> Dict[str, Any]:
        """Run a rollout action (history, pause, resume, restart, status, undo) on a workload.

        - resource_type: deployment, statefulset or daemonset
        - namespace: defaults to the server's configured namespace
        - revision: for undo, the revision to roll back to (previous when omitted);
          for history, show the pod template of that revision
        """

        err = _auth_or_error(cfg.client_token, client_token)
        if err:
            return err
        return rollout_impl(
            controller,
            action=action,
            resource_type=resource_type,
            resource_name=resource_name,
            namespace=namespace,
            revision=revision,
        )

    @mcp.tool
    def health_check(namespace: Optional[str] = None, client_token: Optional[str] = None) -> Dict[str, Any]:
        """Check API server reachability and access to apps/v1 rollout objects."""

        err = _auth_or_error(cfg.client_token, client_token)
        if err:
            return err
        if clients is None:
            return {"ok": False, "error": "no Kubernetes clients configured"}
        return health_check_impl(clients.apps, clients.version, namespace=namespace or cfg.namespace)

    return mcp


def build_from_env() -> FastMCP:
    cfg = KubernetesMCPServerConfig.from_env()
    clients = load_clients(kubeconfig=cfg.kubeconfig, context=cfg.context)
    controller = RolloutController(
        KubernetesOrchestrationClient(clients.apps, clients.api),
        default_namespace=cfg.namespace,
    )
    return create_server(cfg, controller, clients)


def run() -> None:
    cfg = KubernetesMCPServerConfig.from_env()
    logging.basicConfig(
        level=cfg.log_level,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )

    mcp = build_from_env()
    logger.info("starting kubernetes-rollout-mcp (transport=%s)", cfg.mcp_transport)
    if cfg.mcp_transport == "stdio":
        mcp.run(transport="stdio")
    else:
        mcp.run(transport=cfg.mcp_transport, host=cfg.mcp_host, port=cfg.mcp_port)


if __name__ == "__main__":
    run()
