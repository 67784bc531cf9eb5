"""Core pipeline logic: data model, chunking, caption emission, orchestration."""
