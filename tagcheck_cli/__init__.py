"""tagcheck-cli — report newer tags for the images of running containers."""
