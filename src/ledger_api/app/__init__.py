"""Application wiring: service factories and lifespan."""
