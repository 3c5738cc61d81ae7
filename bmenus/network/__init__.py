"""Websocket transport for the standalone host."""
