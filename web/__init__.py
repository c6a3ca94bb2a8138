"""HTTP surface for the matching engine."""
