"""Services: git, templates, editor session, issues."""
