"""Action items captured from meetings."""
