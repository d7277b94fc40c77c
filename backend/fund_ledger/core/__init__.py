"""Process-level setup shared by the API and scripts."""
