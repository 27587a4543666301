"""HTTP surface of icsproxy (aiohttp application, routes and middlewares)."""
