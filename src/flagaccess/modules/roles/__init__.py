"""Roles module - root roles, project role templates, custom roles."""
