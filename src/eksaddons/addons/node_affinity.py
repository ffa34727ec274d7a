"""Node-affinity selector helpers for DaemonSet objects.

All helpers operate on DaemonSet objects as returned by the cluster API (plain
dicts). Any level of the affinity path may be absent or null.
"""

import copy
from typing import Any

ARCH_LABEL = "kubernetes.io/arch"
ARCH_BETA_LABEL = "beta.kubernetes.io/arch"
ARM64 = "arm64"


def _selector_terms(daemonset: dict[str, Any]) -> list[dict[str, Any]]:
    pod_spec = ((daemonset.get("spec") or {}).get("template") or {}).get("spec") or {}
    node_affinity = (pod_spec.get("affinity") or {}).get("nodeAffinity") or {}
    required = node_affinity.get("requiredDuringSchedulingIgnoredDuringExecution") or {}
    return required.get("nodeSelectorTerms") or []


def match_expressions(daemonset: dict[str, Any]) -> list[dict[str, Any]]:
    """Return every required node-selector match expression as a flat list.

    Args:
        daemonset: DaemonSet object

    Returns:
        Match expressions across all selector terms, empty if none are set
    """
    return [
        expression
        for term in _selector_terms(daemonset)
        for expression in (term.get("matchExpressions") or [])
    ]


def has_arch_value(daemonset: dict[str, Any], arch_label: str, value: str = ARM64) -> bool:
    """Check if any match expression on arch_label already allows value."""
    return any(
        expression.get("key") == arch_label and value in (expression.get("values") or [])
        for expression in match_expressions(daemonset)
    )


def with_arch_value(
    daemonset: dict[str, Any], arch_label: str, value: str = ARM64
) -> dict[str, Any]:
    """Return a copy of daemonset with value appended to matching expressions.

    Only expressions whose key equals arch_label are touched; no terms or
    expressions are created. Values are appended without deduplication, so
    callers check has_arch_value first.

    Args:
        daemonset: DaemonSet object (not modified)
        arch_label: Architecture label key
        value: Architecture value to append

    Returns:
        New DaemonSet object
    """
    updated = copy.deepcopy(daemonset)
    for expression in match_expressions(updated):
        if expression.get("key") == arch_label:
            expression["values"] = list(expression.get("values") or []) + [value]
    return updated
