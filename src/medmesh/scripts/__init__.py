"""Operational scripts for MedMesh deployments."""
