"""Pure scoring rules for the league stages."""
