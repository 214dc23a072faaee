"""Rendering helpers (pygame dashboard, matplotlib map export)."""
