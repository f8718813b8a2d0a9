"""Showfinder: live event discovery over Ticketmaster and Spotify."""

__version__ = "0.1.0"
