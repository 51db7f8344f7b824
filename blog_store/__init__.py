"""Site configuration and content index for a personal blog."""
