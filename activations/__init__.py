"""
Activations module - Post-payment and post-seat-change confirmation.

This module handles:
- Polling sessions and their state machine
- Terminal and rejection predicates
- ActivationPoller (bounded, fixed-interval confirmation loop)
- Payment outcome handling
"""
