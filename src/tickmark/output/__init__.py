"""Output layer — rich rendering and JSON serialisation of ServiceResult."""
