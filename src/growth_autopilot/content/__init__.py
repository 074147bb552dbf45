"""Profile-driven content drafting."""
