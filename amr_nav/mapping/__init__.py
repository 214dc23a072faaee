from .occupancy import SpatialMemory, bresenham

__all__ = ["SpatialMemory", "bresenham"]
