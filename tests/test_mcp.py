from __future__ import annotations

from unittest.mock import MagicMock

from rollout_mcp.config_utils import env_choice, env_int
from rollout_mcp.mcp_servers.kubernetes.config import KubernetesMCPServerConfig
from rollout_mcp.mcp_servers.kubernetes.mcp import _auth_or_error, rollout_impl
from rollout_mcp.mcp_servers.kubernetes.utils.cluster import health_check


def test_rollout_impl_success_envelope(controller, web):
    out = rollout_impl(controller, action="undo", resource_type="deployment", resource_name="web", revision="1")
    assert out["ok"] is True
    assert out["output"] == "deployment.apps/web rolled back to revision 1"
    assert out["namespace"] == "prod"
    assert out["details"]["revision"] == 1


def test_rollout_impl_error_envelope_keeps_context(controller, web):
    out = rollout_impl(controller, action="undo", resource_type="deployment", resource_name="web", namespace="prod", revision=8)
    assert out["ok"] is False
    assert out["error_type"] == "RevisionNotFound"
    assert out["revision"] == 8
    assert out["namespace"] == "prod"
    assert out["name"] == "web"


def test_rollout_impl_unsupported(controller):
    out = rollout_impl(controller, action="pause", resource_type="statefulset", resource_name="db", namespace="ns")
    assert out["ok"] is False
    assert out["error_type"] == "UnsupportedOperation"


def test_rollout_impl_invalid_revision(controller):
    out = rollout_impl(controller, action="undo", resource_type="deployment", resource_name="web", revision="abc")
    assert out["error_type"] == "InvalidArgument"


def test_auth_open_without_token():
    assert _auth_or_error(None, None) is None


def test_auth_rejects_wrong_token():
    assert _auth_or_error("s3cret", "nope")["error"] == "unauthorized"
    assert _auth_or_error("s3cret", "s3cret") is None


def test_config_from_env(monkeypatch):
    monkeypatch.setenv("K8S_NAMESPACE", "apps")
    monkeypatch.setenv("KUBERNETES_MCP_TRANSPORT", "SSE")
    monkeypatch.setenv("KUBERNETES_MCP_PORT", "not-a-port")
    monkeypatch.setenv("KUBERNETES_MCP_LOG_LEVEL", "debug")
    monkeypatch.delenv("K8S_KUBECONFIG", raising=False)

    cfg = KubernetesMCPServerConfig.from_env()

    assert cfg.namespace == "apps"
    assert cfg.mcp_transport == "sse"
    assert cfg.mcp_port == KubernetesMCPServerConfig.DEFAULT_MCP_PORT
    assert cfg.log_level == "DEBUG"
    assert cfg.kubeconfig is None


def test_config_defaults(monkeypatch):
    for var in ("K8S_NAMESPACE", "KUBERNETES_MCP_TRANSPORT", "KUBERNETES_MCP_LOG_LEVEL", "KUBERNETES_MCP_CLIENT_TOKEN"):
        monkeypatch.delenv(var, raising=False)
    cfg = KubernetesMCPServerConfig.from_env()
    assert cfg.namespace == "default"
    assert cfg.mcp_transport == "stdio"
    assert cfg.log_level == "INFO"
    assert cfg.client_token is None


def test_env_helpers(monkeypatch):
    monkeypatch.setenv("X_CHOICE", "bogus")
    monkeypatch.setenv("X_INT", " 42 ")
    assert env_choice("X_CHOICE", "stdio", ("stdio", "sse")) == "stdio"
    assert env_int("X_INT", 0) == 42


def test_health_check_reports_failures_per_check():
    apps = MagicMock()
    apps.list_namespaced_replica_set.side_effect = RuntimeError("boom")
    version = MagicMock()
    version.get_code.return_value = MagicMock(major="1", minor="29", git_version="v1.29.0", platform="linux/amd64")

    out = health_check(apps, version, namespace="prod")

    assert out["reachable"] is True
    assert out["ok"] is False
    assert out["version"]["gitVersion"] == "v1.29.0"
    by_name = {c["name"]: c for c in out["checks"]}
    assert by_name["deployments"]["ok"] is True
    assert by_name["replicasets"]["error"] == "boom"


def test_client_token_from_env_gates_tool_calls(monkeypatch):
    monkeypatch.setenv("KUBERNETES_MCP_CLIENT_TOKEN", "s3cret")
    cfg = KubernetesMCPServerConfig.from_env()
    assert cfg.client_token == "s3cret"
    assert _auth_or_error(cfg.client_token, None)["ok"] is False
    assert _auth_or_error(cfg.client_token, "s3cret") is None
