"""Block editing engine: store, history, reorder, outline, palette and autosave."""
