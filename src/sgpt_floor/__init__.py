"""Small-group training floor coordinator."""
