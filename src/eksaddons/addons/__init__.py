"""Cluster add-on maintenance for eks-addons.

This module keeps managed Kubernetes add-ons in step with the cluster's
control-plane version.
"""

from eksaddons.addons.base import BaseAddon, UpdateResult
from eksaddons.addons.kube_proxy import KubeProxyAddon
from eksaddons.addons.manager import AddonManager

__all__ = ["AddonManager", "BaseAddon", "KubeProxyAddon", "UpdateResult"]
