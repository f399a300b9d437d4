"""OSB HTTP surface."""
