"""Badge definitions and threshold-based awarding."""
