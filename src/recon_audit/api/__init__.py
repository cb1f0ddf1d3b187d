"""HTTP API for the recon audit console."""
