"""HTTP upload surface for the subtitle pipeline."""
