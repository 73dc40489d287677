"""Data module - organizations, projects and their knowledge base."""
