"""Access module - role assignments and permission bindings."""
