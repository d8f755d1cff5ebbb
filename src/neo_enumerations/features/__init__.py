"""Feature modules for neo-enumerations."""
