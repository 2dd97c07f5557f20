"""Demo counter exposed under /count."""
