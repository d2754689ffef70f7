"""Projects module - default role provisioning on project lifecycle events."""
