"""Document patching, dispatch, and traversal for the highlighting pipeline."""
