"""Share links: encode one task into a URL-safe token and read it back."""
