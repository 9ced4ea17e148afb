"""Pipeline stages: scrape, prepare, pre-build, export, import."""
