"""URL shortener service: short-code lifecycle engine with a FastAPI front end."""
