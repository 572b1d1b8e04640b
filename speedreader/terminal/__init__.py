"""Terminal collaborators: render surface, key input and raw-mode scope."""
