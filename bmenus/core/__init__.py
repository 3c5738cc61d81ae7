"""Menu manager, flush scheduler and websocket host."""
