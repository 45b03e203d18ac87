"""Application layer: session use cases and presentation."""
