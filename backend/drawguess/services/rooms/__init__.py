"""Room domain services: lobby, turns, scoring, canvas, chat and timers.

This package contains the game rules that HTTP routes and socket handlers
import, keeping transport concerns separated from the room mechanics. Each
operation reads the room row, applies its change, commits, and then
broadcasts the affected part of the room to the `room:<CODE>` channel.
"""
