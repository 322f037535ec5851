"""Feature packages of neo-tenancy."""
