"""Command-line interface for the DEVONthink bridge."""
