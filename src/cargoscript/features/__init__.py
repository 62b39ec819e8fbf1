"""Feature packages implementing script preparation and caching."""
