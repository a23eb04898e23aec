"""Resources -- turning URIs and inline text into readable byte streams."""
