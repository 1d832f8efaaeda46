"""PiP Anywhere - put the main video of the active tab into picture-in-picture."""

__version__ = "0.3.0"
