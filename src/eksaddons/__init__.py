"""eks-addons - keep EKS cluster add-ons in step with the control plane.

Checks and updates the kube-proxy DaemonSet image and node-affinity to match
the cluster's control-plane version.
"""

from eksaddons.addons import AddonManager, KubeProxyAddon, UpdateResult
from eksaddons.config import AddonsConfig

__version__ = "0.1.0"

__all__ = [
    "AddonManager",
    "AddonsConfig",
    "KubeProxyAddon",
    "UpdateResult",
    "__version__",
]
