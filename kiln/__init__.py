"""Kiln: firmware build-matrix orchestrator for multi-target release bundles."""
