"""An HTTP auction service on MongoDB with batched bid writes and automatic auction closing."""

__version__ = "0.1.0"