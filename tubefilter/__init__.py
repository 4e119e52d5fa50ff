"""Video browsing API that keeps short-form content out of the way."""
