"""Core building blocks shared by every neo-enumerations feature."""
