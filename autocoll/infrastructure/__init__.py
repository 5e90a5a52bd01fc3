"""Infrastructure : implémentations concrètes des ports (persistance SQLModel)."""
