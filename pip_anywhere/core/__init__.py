"""Controller-side authorities: config, sessions, protocol, dispatch."""
