"""Services that turn project inputs into build outputs."""
