"""Business services. Each service owns the unit of work for its operations."""
