"""Infrastructure layer — editor buffer pool and Markdown file I/O."""
