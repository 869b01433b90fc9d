"""Report generation (Markdown / JSON)."""
