"""Planning pipeline: geocoding, enrichment lookups, LLM intent and itinerary steps."""
