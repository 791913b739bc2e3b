"""Follow-up emails drafted from meetings and sent through the mail stub."""
