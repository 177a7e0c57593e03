"""
Seats module - Seat allocation for company members.

This module handles:
- Seat mutation intents
- Seat policy (capacity, self-lock, authorization)
- SeatAllocator (optimistic apply + full-set submission)
"""
