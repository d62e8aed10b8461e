"""Digital business card service (dashboard API + public card pages)."""
