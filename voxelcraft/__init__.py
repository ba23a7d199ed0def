"""Voxel world simulation: chunks, noise terrain, ray picking and camera control."""

__version__ = "0.1.0"