"""Front-end connectors (console REPL)."""
