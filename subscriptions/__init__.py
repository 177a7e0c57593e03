"""
Subscriptions module - Company subscription state and access decisions.

This module handles:
- CompanyRecord entity and its invariants
- EntitlementStore (last-known snapshot, change events)
- EntitlementGate (pure access decision)
- RemoteSync port and its HTTP adapter
- Snapshot caching
"""
