"""Administrative HTTP surface for the cache layer."""
