"""Cluster API access for eks-addons."""

from eksaddons.cluster.kubectl_manager import KubectlManager

__all__ = ["KubectlManager"]
