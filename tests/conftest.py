"""Pytest fixtures for testing eks-addons."""

import os
from typing import Any
from unittest.mock import patch

import pytest

from tests.mocks import FakeClusterClient

KUBE_PROXY_IMAGE = "602401143452.dkr.ecr.us-west-2.amazonaws.com/eks/kube-proxy"


def make_daemonset(
    image: str | None = f"{KUBE_PROXY_IMAGE}:v1.26-eksbuild.1",
    arch_label: str | None = "kubernetes.io/arch",
    arch_values: list[str] | None = None,
    name: str = "kube-proxy",
    namespace: str = "kube-system",
) -> dict[str, Any]:
    """Build a kube-proxy DaemonSet object as returned by the API server.

    Args:
        image: Container image, None for a pod spec without containers
        arch_label: Architecture label key of the node-affinity, None for no affinity
        arch_values: Allowed architecture values (default: amd64)
        name: DaemonSet name
        namespace: DaemonSet namespace
    """
    pod_spec: dict[str, Any] = {
        "containers": [] if image is None else [{"name": "kube-proxy", "image": image}],
        "hostNetwork": True,
    }
    if arch_label is not None:
        pod_spec["affinity"] = {
            "nodeAffinity": {
                "requiredDuringSchedulingIgnoredDuringExecution": {
                    "nodeSelectorTerms": [
                        {
                            "matchExpressions": [
                                {
                                    "key": arch_label,
                                    "operator": "In",
                                    "values": list(arch_values or ["amd64"]),
                                },
                                {
                                    "key": "eks.amazonaws.com/compute-type",
                                    "operator": "NotIn",
                                    "values": ["fargate"],
                                },
                            ]
                        }
                    ]
                }
            }
        }

    return {
        "apiVersion": "apps/v1",
        "kind": "DaemonSet",
        "metadata": {"name": name, "namespace": namespace, "resourceVersion": "1234"},
        "spec": {"template": {"spec": pod_spec}},
    }


@pytest.fixture
def daemonset_factory():
    """Expose make_daemonset to tests."""
    return make_daemonset


@pytest.fixture
def fake_client() -> FakeClusterClient:
    """Cluster with an outdated kube-proxy lacking the arm64 selector value."""
    return FakeClusterClient([make_daemonset()])


@pytest.fixture
def empty_client() -> FakeClusterClient:
    """Cluster without kube-proxy."""
    return FakeClusterClient()


@pytest.fixture
def clean_env():
    """Run with an environment free of eks-addons settings."""
    with patch.dict(os.environ, {}, clear=True), patch("eksaddons.config.load_dotenv"):
        yield
