"""Request-resilience services: response cache, upstream clients, client gateway."""
