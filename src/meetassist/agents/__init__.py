"""AI agent configurations and reusable agent templates."""
