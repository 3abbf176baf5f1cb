"""External provider clients: enrichment/search, web content, e-mail, CSV import."""
