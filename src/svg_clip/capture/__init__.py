"""Browser session, timeline, and frame capture loop."""
