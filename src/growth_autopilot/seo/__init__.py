"""Static-site SEO scanning."""
