"""Sales-force reporting API with territory hierarchy roll-ups."""
