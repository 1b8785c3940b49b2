"""Client-side simulation core for a persistent multiplayer Game of Life."""
