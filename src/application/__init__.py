"""Application layer: optimizer, simulation and derived analyses."""
