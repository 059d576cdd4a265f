"""KisanPath lesson delivery backend."""
