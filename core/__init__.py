"""Label engine: store, resolver, dispatcher, history and failure tracking."""
