"""Page output backends."""
