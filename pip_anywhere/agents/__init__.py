"""Page-side agent: locate, select and activate the main video."""
