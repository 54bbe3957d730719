"""Version parsing, comparison and resolution."""
