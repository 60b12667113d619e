"""Client core: entity store, derived views, blocking, progression and mutations."""
