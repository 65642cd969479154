"""Transform factories for links, tags and frontmatter."""
