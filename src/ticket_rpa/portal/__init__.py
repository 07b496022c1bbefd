"""Portal-specific UI steps: login, project navigation, tickets and chatter."""
