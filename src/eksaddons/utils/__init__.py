"""Utility helpers for eks-addons."""
