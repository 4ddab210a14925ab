"""Read and write the raw pixel chunks, offset tables and uncompressed block lines of OpenEXR files."""

__version__ = "0.1.0"
__all__ = ["block", "chunk", "lines", "primitives", "reader", "samples", "writer"]