"""HTTP surface for the lead-generation assistant (FastAPI)."""
