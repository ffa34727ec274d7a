"""Base addon class for updatable cluster add-ons."""

import enum
import json
import logging
from abc import ABC, abstractmethod
from typing import Any, Protocol

logger = logging.getLogger(__name__)


class DaemonSetClient(Protocol):
    """Cluster API operations needed by DaemonSet based addons."""

    def get_daemonset(self, name: str, namespace: str) -> dict[str, Any]: ...

    def update_daemonset(self, daemonset: dict[str, Any]) -> dict[str, Any]: ...


class UpdateResult(enum.Enum):
    """Outcome of applying an addon update."""

    NO_CHANGE_NEEDED = "no-change-needed"
    APPLIED = "applied"
    CHANGE_PENDING = "change-pending"

    @property
    def pending(self) -> bool:
        """True only when a change was detected but not applied (plan mode)."""
        return self is UpdateResult.CHANGE_PENDING


class BaseAddon(ABC):
    """Abstract base class for cluster add-ons kept in step with the control plane.

    All add-ons should inherit from this class and implement the abstract methods.
    """

    def __init__(self, config: dict[str, Any] | None = None):
        """Initialize addon.

        Args:
            config: Optional configuration dict for the addon
        """
        self.config = config or {}
        self.addon_name = self.__class__.__name__.replace("Addon", "").lower()

    def log_debug(self, message: str) -> None:
        """Log debug message with addon prefix."""
        logger.debug(f"[{self.addon_name}] {message}")

    def log_info(self, message: str) -> None:
        """Log info message with addon prefix."""
        logger.info(f"[{self.addon_name}] {message}")

    def log_warn(self, message: str) -> None:
        """Log warning message with addon prefix."""
        logger.warning(f"[{self.addon_name}] {message}")

    def log_error(self, message: str) -> None:
        """Log error message with addon prefix."""
        logger.error(f"[{self.addon_name}] {message}")

    def log_critical(self, message: str) -> None:
        """Log critical message with addon prefix."""
        logger.critical(f"[{self.addon_name}] {message}")

    def log_object(self, label: str, obj: dict[str, Any]) -> None:
        """Log a cluster object as indented JSON at debug level."""
        if logger.isEnabledFor(logging.DEBUG):
            self.log_debug(f"{label} = \\\n{json.dumps(obj, indent=2, sort_keys=True)}")

    @abstractmethod
    def is_up_to_date(self, client: DaemonSetClient, control_plane_version: str) -> bool:
        """Check if the addon matches the control-plane version.

        Args:
            client: Cluster API client
            control_plane_version: Control-plane version (e.g. "1.27")

        Returns:
            True if no update is needed
        """
        pass

    @abstractmethod
    def apply(
        self, client: DaemonSetClient, control_plane_version: str, dry_run: bool = False
    ) -> UpdateResult:
        """Bring the addon up to date with the control-plane version.

        Args:
            client: Cluster API client
            control_plane_version: Control-plane version (e.g. "1.27")
            dry_run: Only report whether a change is needed

        Returns:
            Outcome of the update
        """
        pass

    def check(self, client: DaemonSetClient, control_plane_version: str) -> dict[str, Any]:
        """Run the up-to-date check and wrap the outcome in a result dict.

        Returns:
            Dict with keys: success, addon, up_to_date, message (error on failure)
        """
        try:
            up_to_date = self.is_up_to_date(client, control_plane_version)
        except Exception as e:
            self.log_error(f"Check failed: {e}")
            return {
                "success": False,
                "addon": self.addon_name,
                "error": str(e),
                "message": f"{self.addon_name} check failed: {e}",
            }

        state = "up-to-date" if up_to_date else "not up-to-date"
        return {
            "success": True,
            "addon": self.addon_name,
            "up_to_date": up_to_date,
            "message": f"{self.addon_name} is {state}",
        }

    def run(
        self, client: DaemonSetClient, control_plane_version: str, dry_run: bool = False
    ) -> dict[str, Any]:
        """Run the update flow and wrap the outcome in a result dict.

        Returns:
            Dict with keys: success, addon, result, pending, message (error on failure)
        """
        mode = "plan" if dry_run else "update"
        self.log_info(f"Starting {mode} for control-plane version {control_plane_version}")

        try:
            result = self.apply(client, control_plane_version, dry_run=dry_run)
        except Exception as e:
            self.log_error(f"Update failed: {e}")
            return {
                "success": False,
                "addon": self.addon_name,
                "error": str(e),
                "message": f"{self.addon_name} update failed: {e}",
            }

        messages = {
            UpdateResult.NO_CHANGE_NEEDED: f"{self.addon_name} is already up-to-date",
            UpdateResult.APPLIED: f"{self.addon_name} updated successfully",
            UpdateResult.CHANGE_PENDING: f"{self.addon_name} is not up-to-date (no changes applied)",
        }
        return {
            "success": True,
            "addon": self.addon_name,
            "result": result,
            "pending": result.pending,
            "message": messages[result],
        }
