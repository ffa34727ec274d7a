"""Tests for AddonManager."""

from unittest.mock import MagicMock, patch

import pytest

from eksaddons.addons.base import UpdateResult
from eksaddons.addons.manager import AddonManager
from tests.mocks import FakeClusterClient


@pytest.fixture
def manager(fake_client):
    """Create addon manager for testing."""
    return AddonManager(fake_client)


def test_manager_initialization(manager, fake_client):
    """Test manager initialization."""
    assert manager.client is fake_client
    assert manager.configs == {}
    assert len(manager._addon_registry) > 0


def test_validate_addon_name_success(manager):
    """Test valid addon names and aliases."""
    assert manager._validate_addon_name("kube-proxy") == "kube-proxy"
    assert manager._validate_addon_name("KUBE-PROXY") == "kube-proxy"
    assert manager._validate_addon_name(" proxy ") == "kube-proxy"
    assert manager._validate_addon_name("kubeproxy") == "kube-proxy"


def test_validate_addon_name_invalid(manager):
    """Test invalid addon name."""
    with pytest.raises(ValueError, match="Unknown addon"):
        manager._validate_addon_name("coredns")


def test_get_addon_instance_uses_config(fake_client):
    """Addon config is looked up by canonical name."""
    manager = AddonManager(fake_client, {"kube-proxy": {"namespace": "networking"}})

    addon = manager._get_addon_instance(manager._validate_addon_name("proxy"))

    assert addon.namespace == "networking"


@pytest.mark.parametrize("key", ["proxy", "kubeproxy", "Kube-Proxy"])
def test_config_keyed_by_alias(daemonset_factory, key):
    """Settings under an alias apply to the canonical addon."""
    client = FakeClusterClient([daemonset_factory(namespace="networking")])
    manager = AddonManager(client, {key: {"namespace": "networking"}})

    result = manager.check_addons(["kube-proxy"], "1.26")

    assert result["success"] is True
    assert result["results"]["kube-proxy"]["up_to_date"] is True
    assert client.get_calls == [("kube-proxy", "networking")]


def test_check_addons_empty_list(manager):
    """Test checking with empty addon list."""
    result = manager.check_addons([], "1.27")

    assert result["success"] is True
    assert result["results"] == {}
    assert "No addons specified" in result["message"]


def test_check_addons_outdated(manager):
    """Outdated kube-proxy is reported."""
    result = manager.check_addons(["kube-proxy"], "1.27")

    assert result["success"] is True
    assert result["outdated"] == ["kube-proxy"]
    assert result["results"]["kube-proxy"]["up_to_date"] is False
    assert "0/1 up-to-date" in result["message"]


def test_check_addons_up_to_date(manager):
    """Current kube-proxy is reported up to date."""
    result = manager.check_addons(["kube-proxy"], "1.26")

    assert result["outdated"] == []
    assert "1/1 up-to-date" in result["message"]


def test_check_addons_invalid_name(manager):
    """Invalid names fail without stopping valid ones."""
    result = manager.check_addons(["coredns", "kube-proxy"], "1.26")

    assert result["success"] is False
    assert result["failed"] == ["coredns"]
    assert "Invalid addon name" in result["results"]["coredns"]["message"]
    assert result["results"]["kube-proxy"]["up_to_date"] is True


def test_update_addons_plan(manager, fake_client):
    """Plan mode reports pending changes without updating."""
    result = manager.update_addons(["kube-proxy"], "1.27", dry_run=True)

    assert result["success"] is True
    assert result["pending"] == ["kube-proxy"]
    assert fake_client.updates == []
    assert "1 with pending changes" in result["message"]


def test_update_addons_apply(manager, fake_client):
    """Approved update is applied once, even with aliases."""
    result = manager.update_addons(["kube-proxy", "proxy", "kubeproxy"], "1.27", dry_run=False)

    assert result["success"] is True
    assert result["pending"] == []
    assert result["results"]["kube-proxy"]["result"] is UpdateResult.APPLIED
    assert len(fake_client.updates) == 1
    assert "1/1 succeeded" in result["message"]


def test_update_addons_not_installed(empty_client):
    """Missing kube-proxy is a successful no-op."""
    result = AddonManager(empty_client).update_addons(["kube-proxy"], "1.27", dry_run=False)

    assert result["success"] is True
    assert result["results"]["kube-proxy"]["result"] is UpdateResult.NO_CHANGE_NEEDED


def test_update_addons_failure(daemonset_factory):
    """Addon errors are reported as failures."""
    client = FakeClusterClient([daemonset_factory(image="badimageformat")])

    result = AddonManager(client).update_addons(["kube-proxy"], "1.27", dry_run=False)

    assert result["success"] is False
    assert result["failed"] == ["kube-proxy"]
    assert "unexpected image format" in result["results"]["kube-proxy"]["error"]
    assert "1 failed" in result["message"]


@patch("eksaddons.addons.manager.KubeProxyAddon")
def test_update_addons_passes_arguments(mock_addon_class, fake_client):
    """Client, version and dry-run flag are handed to the addon."""
    mock_addon = MagicMock()
    mock_addon.addon_name = "kube-proxy"
    mock_addon.run.return_value = {"success": True, "pending": False, "message": "ok"}
    mock_addon_class.return_value = mock_addon

    manager = AddonManager(fake_client)
    manager.update_addons(["kube-proxy"], "1.28", dry_run=False)

    mock_addon.run.assert_called_once_with(fake_client, "1.28", dry_run=False)
