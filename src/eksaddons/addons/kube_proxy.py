"""kube-proxy addon.

Keeps kube-system/daemonset/kube-proxy on the image tag matching the
control-plane version and makes sure arm64 nodes are allowed by its
node-affinity.
"""

import copy
from typing import Any

from eksaddons.addons.base import BaseAddon, DaemonSetClient, UpdateResult
from eksaddons.addons.node_affinity import (
    ARCH_BETA_LABEL,
    ARCH_LABEL,
    ARM64,
    has_arch_value,
    with_arch_value,
)
from eksaddons.utils.errors import (
    ImageFormatError,
    ResourceNotFoundError,
    WorkloadIntegrityError,
)
from eksaddons.utils.version import is_min_version

# kubernetes.io/arch replaced beta.kubernetes.io/arch on kube-proxy from 1.18
ARCH_LABEL_MIN_VERSION = "1.18"


def image_tag(image: str) -> str:
    """Return the tag of a repository:tag image reference.

    Raises:
        ImageFormatError: If the image doesn't split into exactly repository and tag
    """
    parts = image.split(":")
    if len(parts) != 2:
        raise ImageFormatError(f"unexpected image format {image!r}")
    return parts[1]


def arch_label_for(control_plane_version: str) -> str:
    """Return the node architecture label key used at control_plane_version.

    Raises:
        VersionComparisonError: If the version is malformed
    """
    if is_min_version(ARCH_LABEL_MIN_VERSION, control_plane_version):
        return ARCH_LABEL
    return ARCH_BETA_LABEL


class KubeProxyAddon(BaseAddon):
    """kube-proxy DaemonSet addon.

    Both operations read the DaemonSet fresh on every call. A cluster without
    kube-proxy is treated as having nothing to manage.
    """

    DEFAULT_NAME = "kube-proxy"
    DEFAULT_NAMESPACE = "kube-system"
    DEFAULT_IMAGE_BUILD = "eksbuild.1"

    def __init__(self, config: dict[str, Any] | None = None):
        """Initialize kube-proxy addon.

        Args:
            config: Optional configuration:
                - name: DaemonSet name (default: kube-proxy)
                - namespace: Kubernetes namespace (default: kube-system)
                - image_build: Image tag build suffix (default: eksbuild.1)
        """
        super().__init__(config)
        self.name = self.config.get("name", self.DEFAULT_NAME)
        self.namespace = self.config.get("namespace", self.DEFAULT_NAMESPACE)
        self.image_build = self.config.get("image_build", self.DEFAULT_IMAGE_BUILD)
        self.addon_name = "kube-proxy"

    def expected_image_tag(self, control_plane_version: str) -> str:
        """Image tag kube-proxy should run for the control-plane version."""
        return f"v{control_plane_version}-{self.image_build}"

    def _get(self, client: DaemonSetClient) -> dict[str, Any] | None:
        try:
            return client.get_daemonset(self.name, self.namespace)
        except ResourceNotFoundError:
            self.log_warn(f"{self.name!r} was not found")
            return None

    def _containers(self, daemonset: dict[str, Any]) -> list[dict[str, Any]]:
        pod_spec = ((daemonset.get("spec") or {}).get("template") or {}).get("spec") or {}
        containers = pod_spec.get("containers") or []
        if len(containers) < 1:
            raise WorkloadIntegrityError(
                f"{self.name} has {len(containers)} containers, expected at least 1"
            )
        return containers

    def _current_image(self, daemonset: dict[str, Any]) -> tuple[str, str]:
        image = self._containers(daemonset)[0].get("image") or ""
        try:
            return image, image_tag(image)
        except ImageFormatError as e:
            raise ImageFormatError(f"unexpected image format {image!r} for {self.name!r}") from e

    def is_up_to_date(self, client: DaemonSetClient, control_plane_version: str) -> bool:
        """Check whether kube-proxy runs the image tag for control_plane_version.

        Returns:
            True if the tags match or kube-proxy is not deployed

        Raises:
            WorkloadIntegrityError: If the DaemonSet has no containers
            ImageFormatError: If the image reference is malformed
            KubectlCommandError: If the DaemonSet cannot be read
        """
        daemonset = self._get(client)
        if daemonset is None:
            return True

        desired_tag = self.expected_image_tag(control_plane_version)
        _, current_tag = self._current_image(daemonset)
        return current_tag == desired_tag

    def apply(
        self, client: DaemonSetClient, control_plane_version: str, dry_run: bool = False
    ) -> UpdateResult:
        """Update the kube-proxy image tag and arm64 node-affinity.

        The fetched object is left untouched; the update call receives a new
        object derived from it.

        Returns:
            NO_CHANGE_NEEDED if already current or not deployed,
            CHANGE_PENDING if dry_run and a change is needed,
            APPLIED after a successful update

        Raises:
            VersionComparisonError: If control_plane_version is malformed
            WorkloadIntegrityError: If the DaemonSet has no containers
            ImageFormatError: If the image reference is malformed
            KubectlCommandError: If the DaemonSet cannot be read or updated
        """
        daemonset = self._get(client)
        if daemonset is None:
            return UpdateResult.NO_CHANGE_NEEDED

        arch_label = arch_label_for(control_plane_version)
        has_arm64 = has_arch_value(daemonset, arch_label, ARM64)
        if not has_arm64:
            self.log_info(f"missing {ARM64} nodeSelector value")

        self._containers(daemonset)
        self.log_object(f"{self.name} [current]", daemonset)

        image, current_tag = self._current_image(daemonset)
        desired_tag = self.expected_image_tag(control_plane_version)

        if current_tag == desired_tag and has_arm64:
            self.log_debug(f"image = {image}, desired tag = {desired_tag}")
            self.log_info(f"{self.name!r} is already up-to-date")
            return UpdateResult.NO_CHANGE_NEEDED

        if dry_run:
            self.log_critical(f"(plan) {self.name!r} is not up-to-date")
            return UpdateResult.CHANGE_PENDING

        updated = copy.deepcopy(daemonset)
        repository = image.split(":")[0]
        updated["spec"]["template"]["spec"]["containers"][0]["image"] = (
            f"{repository}:{desired_tag}"
        )
        if not has_arm64:
            updated = with_arch_value(updated, arch_label, ARM64)

        self.log_object(f"{self.name} [updated]", updated)

        client.update_daemonset(updated)

        self.log_info(f"{self.name!r} is now up-to-date")
        return UpdateResult.APPLIED
