"""Array kernels, boxes and NMS, configuration parsing, dataset containers and loaders for neural-network training."""

__version__ = "0.1.0"