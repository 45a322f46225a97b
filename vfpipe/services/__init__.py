"""Services layer of vfpipe."""
