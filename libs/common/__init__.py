"""Common utilities shared by libs packages."""
