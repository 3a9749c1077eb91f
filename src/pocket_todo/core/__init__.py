"""Session state, change events and the ports commands depend on."""
