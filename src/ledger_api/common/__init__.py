"""Cross-cutting helpers shared by every feature."""
