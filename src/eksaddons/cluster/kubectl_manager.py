"""Kubectl resource management operations."""

import json
import logging
import subprocess
import tempfile
from pathlib import Path
from typing import Any

from eksaddons.utils.errors import (
    KubectlCommandError,
    ResourceConflictError,
    ResourceNotFoundError,
)

logger = logging.getLogger(__name__)


def _is_not_found(output: str, name: str) -> bool:
    # Only the API server reply naming this DaemonSet, not client-side "not found"
    # messages such as a missing credential helper.
    return "Error from server (NotFound)" in output and f'daemonsets.apps "{name}"' in output


class KubectlManager:
    """Manager for kubectl operations against a single cluster."""

    def __init__(
        self,
        kubeconfig_path: Path | None = None,
        context: str | None = None,
        timeout: int = 30,
    ):
        """Initialize kubectl manager.

        Args:
            kubeconfig_path: Path to kubeconfig file (kubectl default if None)
            context: Kubeconfig context to use (current context if None)
            timeout: Default command timeout in seconds
        """
        self.kubeconfig_path = kubeconfig_path
        self.context = context
        self.timeout = timeout
        self._check_kubectl_available()

    def _check_kubectl_available(self) -> None:
        """Check if kubectl CLI is available.

        Raises:
            KubectlCommandError: If kubectl is not available
        """
        try:
            result = subprocess.run(
                ["kubectl", "version", "--client"],
                capture_output=True,
                text=True,
                timeout=10,
            )
            if result.returncode != 0:
                raise KubectlCommandError("kubectl CLI is not available or not working correctly")
            logger.debug(f"kubectl version: {result.stdout.strip()}")
        except FileNotFoundError as e:
            raise KubectlCommandError(
                "kubectl CLI not found. Please install kubectl: "
                "https://kubernetes.io/docs/tasks/tools/install-kubectl/"
            ) from e
        except subprocess.TimeoutExpired as e:
            raise KubectlCommandError("kubectl version check timed out") from e

    def _base_command(self) -> list[str]:
        cmd = ["kubectl"]
        if self.kubeconfig_path:
            cmd.extend(["--kubeconfig", str(self.kubeconfig_path)])
        if self.context:
            cmd.extend(["--context", self.context])
        return cmd

    def _run_kubectl(
        self, args: list[str], timeout: int | None = None
    ) -> subprocess.CompletedProcess[str]:
        """Run kubectl command with the configured kubeconfig and context.

        Args:
            args: Command arguments
            timeout: Command timeout in seconds (manager default if None)

        Returns:
            Completed subprocess

        Raises:
            KubectlCommandError: If the command cannot be run
        """
        timeout = timeout or self.timeout
        cmd = self._base_command() + args
        logger.debug(f"Running kubectl command: {' '.join(cmd)}")

        try:
            return subprocess.run(
                cmd,
                capture_output=True,
                text=True,
                timeout=timeout,
            )
        except subprocess.TimeoutExpired as e:
            raise KubectlCommandError(f"kubectl command timed out after {timeout} seconds") from e
        except FileNotFoundError as e:
            raise KubectlCommandError("kubectl CLI not found in PATH") from e

    @staticmethod
    def _parse_object(output: str) -> dict[str, Any]:
        try:
            data = json.loads(output)
        except json.JSONDecodeError as e:
            raise KubectlCommandError(f"Failed to parse kubectl output as JSON: {e}") from e
        if not isinstance(data, dict):
            raise KubectlCommandError("Unexpected kubectl output: expected a JSON object")
        return data

    def get_daemonset(self, name: str, namespace: str) -> dict[str, Any]:
        """Get a DaemonSet by name.

        Args:
            name: DaemonSet name
            namespace: Kubernetes namespace

        Returns:
            DaemonSet object as a dict

        Raises:
            ResourceNotFoundError: If the DaemonSet doesn't exist
            KubectlCommandError: If kubectl command fails
        """
        args = ["get", "daemonset", name, "-n", namespace, "-o", "json"]
        result = self._run_kubectl(args)

        if result.returncode != 0:
            error_msg = result.stderr or result.stdout
            if _is_not_found(error_msg, name):
                raise ResourceNotFoundError(
                    f"DaemonSet '{name}' not found in namespace '{namespace}'"
                )
            raise KubectlCommandError(
                f"Failed to get daemonset/{name} in namespace '{namespace}': {error_msg}"
            )

        daemonset = self._parse_object(result.stdout)
        logger.debug(f"Fetched daemonset/{name} in namespace '{namespace}'")
        return daemonset

    def update_daemonset(self, daemonset: dict[str, Any]) -> dict[str, Any]:
        """Replace a DaemonSet with the given object.

        The object must carry metadata.resourceVersion from the read it was
        derived from; the API server rejects the write if the resource changed.

        Args:
            daemonset: Complete DaemonSet object

        Returns:
            Updated DaemonSet as returned by the API server

        Raises:
            ResourceConflictError: If the DaemonSet changed since it was read
            ResourceNotFoundError: If the DaemonSet no longer exists
            KubectlCommandError: If kubectl command fails
        """
        metadata = daemonset.get("metadata") or {}
        name = metadata.get("name", "<unknown>")
        namespace = metadata.get("namespace", "default")

        temp_file = None
        try:
            with tempfile.NamedTemporaryFile(mode="w", suffix=".json", delete=False) as f:
                json.dump(daemonset, f)
                temp_file = f.name

            args = ["replace", "-f", temp_file, "-n", namespace, "-o", "json"]
            result = self._run_kubectl(args, timeout=max(self.timeout, 60))

            if result.returncode != 0:
                error_msg = result.stderr or result.stdout
                if "Conflict" in error_msg or "the object has been modified" in error_msg:
                    raise ResourceConflictError(
                        f"Conflict updating daemonset/{name} in namespace '{namespace}': {error_msg}"
                    )
                if _is_not_found(error_msg, name):
                    raise ResourceNotFoundError(
                        f"DaemonSet '{name}' not found in namespace '{namespace}'"
                    )
                raise KubectlCommandError(
                    f"Failed to update daemonset/{name} in namespace '{namespace}': {error_msg}"
                )

            logger.info(f"Updated daemonset/{name} in namespace '{namespace}'")
            return self._parse_object(result.stdout)

        finally:
            # Clean up temporary file
            if temp_file:
                Path(temp_file).unlink(missing_ok=True)
