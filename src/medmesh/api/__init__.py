"""HTTP API for MedMesh."""
