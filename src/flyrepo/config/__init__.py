"""flyrepo configuration properties."""
