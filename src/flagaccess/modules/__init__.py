"""Feature modules: users, roles, access, projects."""
