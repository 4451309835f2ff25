"""Django applications that make up CourtBook."""
