"""Test doubles for eks-addons."""

from tests.mocks.fake_cluster import FakeClusterClient

__all__ = ["FakeClusterClient"]
