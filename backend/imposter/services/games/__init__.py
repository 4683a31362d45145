"""Game domain services: lobbies, rounds, votes, scoring and clients.

This package contains the game logic imported by the HTTP routes and the
CLI, keeping transport concerns separated from core game mechanics. The
clock and bot modules run on the polling side and only consume snapshots.
"""
