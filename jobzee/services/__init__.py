"""Business logic shared by the route modules and external service clients."""
