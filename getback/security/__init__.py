"""Request authentication and secret handling."""
