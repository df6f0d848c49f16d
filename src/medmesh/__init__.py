"""MedMesh: a marketplace API for sharing medical 3D models."""

__version__ = "0.1.0"
