"""Simulated world, robot, range sensor and tick loop."""
