"""Application services: intent routing and slot enrichment."""
