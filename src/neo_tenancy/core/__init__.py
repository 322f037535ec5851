"""Core building blocks shared by every neo-tenancy feature."""
