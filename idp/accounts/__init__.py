"""Account storage and verification mail collaborators used by the wsapi handlers."""
