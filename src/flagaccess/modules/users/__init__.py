"""Users module - principals referenced by role assignments."""
