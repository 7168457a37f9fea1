"""Shared test fixtures for niri workspace bridge tests."""
