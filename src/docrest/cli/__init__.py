"""docrest command-line interface (``docrest`` entry point)."""
