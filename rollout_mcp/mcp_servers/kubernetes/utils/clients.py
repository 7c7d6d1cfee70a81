from __future__ import annotations

import os
from dataclasses import dataclass
from typing import Optional

from kubernetes import client, config


@dataclass(frozen=True)
class KubernetesClientSet:
    apps: client.AppsV1Api
    version: client.VersionApi
    api: client.ApiClient


def _in_cluster() -> bool:
    return bool(os.environ.get("KUBERNETES_SERVICE_HOST"))


def load_clients(*, kubeconfig: Optional[str] = None, context: Optional[str] = None) -> KubernetesClientSet:
    """Create Kubernetes API clients using kubeconfig/context.

    This is the single place where we load kubeconfig; callers pass the result
    down explicitly. With neither kubeconfig nor context set, a pod uses its
    service account and everything else falls back to the default kubeconfig.
    """

    if kubeconfig or context:
        config.load_kube_config(config_file=kubeconfig, context=context)
    elif _in_cluster():
        config.load_incluster_config()
    else:
        config.load_kube_config()

    api = client.ApiClient()
    return KubernetesClientSet(
        apps=client.AppsV1Api(api),
        version=client.VersionApi(api),
        api=api,
    )
