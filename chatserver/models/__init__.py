"""Value types shared by the engine and the API layer."""
