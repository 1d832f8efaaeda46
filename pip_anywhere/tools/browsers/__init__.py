"""Browsers domain - Browser automation tools

The only tools exposed are the ones the trigger sources need:
opening a session and firing one PiP trigger at the active tab.
"""
