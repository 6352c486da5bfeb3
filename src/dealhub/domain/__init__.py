"""Domain layer - pure business concepts with no framework dependencies."""
