"""PhotoPrism API access."""
