"""Cross-cutting helpers shared by the entry points."""
