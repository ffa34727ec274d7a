"""Addon manager for orchestrating addon checks and updates."""

import logging
from typing import Any

from eksaddons.addons.base import BaseAddon, DaemonSetClient
from eksaddons.addons.kube_proxy import KubeProxyAddon

logger = logging.getLogger(__name__)


class AddonManager:
    """Manages checks and updates of cluster add-ons."""

    def __init__(
        self, client: DaemonSetClient, configs: dict[str, dict[str, Any]] | None = None
    ):
        """Initialize addon manager.

        Args:
            client: Cluster API client shared by all addons
            configs: Optional dict of addon-specific configurations keyed by addon
                name or alias
        """
        self.client = client
        self._addon_registry: dict[str, type[BaseAddon]] = {}
        self._aliases: dict[str, str] = {}
        self._register_addons()
        self.configs = {
            self._canonical_name(name): settings for name, settings in (configs or {}).items()
        }

    def _register_addons(self) -> None:
        """Register available addons."""
        self._addon_registry = {
            "kube-proxy": KubeProxyAddon,
        }
        self._aliases = {
            "kubeproxy": "kube-proxy",
            "proxy": "kube-proxy",
        }

    def _canonical_name(self, name: str) -> str:
        name_lower = name.lower().strip()
        return self._aliases.get(name_lower, name_lower)

    def _validate_addon_name(self, name: str) -> str:
        """Validate and normalize addon name.

        Args:
            name: Addon name

        Returns:
            Canonical addon name

        Raises:
            ValueError: If addon name is invalid
        """
        name_lower = self._canonical_name(name)
        if name_lower not in self._addon_registry:
            available = ", ".join(sorted(set(self._addon_registry) | set(self._aliases)))
            raise ValueError(f"Unknown addon: '{name}'. Available addons: {available}")
        return name_lower

    def _get_addon_instance(self, name: str) -> BaseAddon:
        """Get an addon instance configured from self.configs."""
        addon_class = self._addon_registry[name]
        return addon_class(self.configs.get(name))

    def _resolve(
        self, addon_names: list[str], results: dict[str, Any], failed: list[str]
    ) -> list[str]:
        """Deduplicate and normalize addon names, recording invalid ones."""
        unique_addons = []
        seen = set()
        for name in addon_names:
            try:
                normalized = self._validate_addon_name(name)
            except ValueError as e:
                logger.warning(str(e))
                failed.append(name)
                results[name] = {
                    "success": False,
                    "error": str(e),
                    "message": f"Invalid addon name: {name}",
                }
                continue

            if normalized not in seen:
                unique_addons.append(normalized)
                seen.add(normalized)
        return unique_addons

    def check_addons(self, addon_names: list[str], control_plane_version: str) -> dict[str, Any]:
        """Check whether addons match the control-plane version.

        Args:
            addon_names: List of addon names to check
            control_plane_version: Control-plane version (e.g. "1.27")

        Returns:
            Dict with check results:
            - success: bool (True if every check ran)
            - results: dict of addon_name -> result
            - failed: list of addon names whose check failed
            - outdated: list of addon names that need an update
            - message: summary message
        """
        if not addon_names:
            return {
                "success": True,
                "results": {},
                "failed": [],
                "outdated": [],
                "message": "No addons specified",
            }

        results: dict[str, Any] = {}
        failed: list[str] = []
        unique_addons = self._resolve(addon_names, results, failed)

        for addon_name in unique_addons:
            addon = self._get_addon_instance(addon_name)
            result = addon.check(self.client, control_plane_version)
            results[addon.addon_name] = result
            if not result.get("success"):
                failed.append(addon.addon_name)

        outdated = [
            name
            for name, result in results.items()
            if result.get("success") and not result.get("up_to_date")
        ]
        total = len(unique_addons)
        up_to_date = sum(1 for r in results.values() if r.get("up_to_date"))
        message = f"Addons: {up_to_date}/{total} up-to-date"
        if outdated:
            message += f", {len(outdated)} outdated: {', '.join(outdated)}"
        if failed:
            message += f", {len(failed)} failed: {', '.join(failed)}"

        return {
            "success": len(failed) == 0,
            "results": results,
            "failed": failed,
            "outdated": outdated,
            "message": message,
        }

    def update_addons(
        self, addon_names: list[str], control_plane_version: str, dry_run: bool = True
    ) -> dict[str, Any]:
        """Update addons to match the control-plane version.

        Args:
            addon_names: List of addon names to update
            control_plane_version: Control-plane version (e.g. "1.27")
            dry_run: Only report pending changes (plan mode)

        Returns:
            Dict with update results:
            - success: bool (True if every update ran without error)
            - results: dict of addon_name -> result
            - failed: list of failed addon names
            - pending: list of addon names with changes not applied
            - message: summary message
        """
        if not addon_names:
            return {
                "success": True,
                "results": {},
                "failed": [],
                "pending": [],
                "message": "No addons specified",
            }

        results: dict[str, Any] = {}
        failed: list[str] = []
        unique_addons = self._resolve(addon_names, results, failed)

        logger.info(
            f"Updating {len(unique_addons)} addon(s) to control-plane version "
            f"{control_plane_version}: {', '.join(unique_addons)}"
        )

        # Addons are independent, a failure does not stop the others
        for addon_name in unique_addons:
            logger.info(f"Processing addon: {addon_name}")
            addon = self._get_addon_instance(addon_name)
            result = addon.run(self.client, control_plane_version, dry_run=dry_run)
            results[addon.addon_name] = result

            if not result.get("success"):
                failed.append(addon.addon_name)
                logger.warning(f"Addon '{addon.addon_name}' update failed (continuing with others)")

        pending = [name for name, result in results.items() if result.get("pending")]
        total = len(unique_addons)
        succeeded = sum(1 for r in results.values() if r.get("success"))

        message = f"Addons: {succeeded}/{total} succeeded"
        if pending:
            message += f", {len(pending)} with pending changes: {', '.join(pending)}"
        if failed:
            message += f", {len(failed)} failed: {', '.join(failed)}"

        return {
            "success": len(failed) == 0,
            "results": results,
            "failed": failed,
            "pending": pending,
            "message": message,
        }
