"""Stage services for the league scoring engine."""
