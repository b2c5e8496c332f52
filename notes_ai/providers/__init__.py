"""Remote service providers."""
