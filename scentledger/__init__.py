"""FIFO inventory allocation and sale settlement for a perfume resale business."""

__version__ = "1.0.0"
