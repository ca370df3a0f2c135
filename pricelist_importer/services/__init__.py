"""Services: remote client, import session, submission pipeline, batch orchestration."""
