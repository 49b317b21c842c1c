"""Plugins that ship with catgen."""
