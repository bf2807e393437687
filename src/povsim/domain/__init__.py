"""Domain models: definitions, session state and pure scoring rules."""
