"""Pricing & Duration Override Resolution Engine.

Resolves the price and duration that actually apply to a service for every
(service, location, staff) combination of a multi-tenant booking back-office,
and manages the editing lifecycle of the overrides behind them.

The package follows a modular layout with separate concerns for:
- Currency minor-unit conversion and currency metadata
- Three-tier override resolution (service -> location -> staff)
- Draft sessions for single-row editors and the staff services drawer
- Reconciliation of location assignments with staff settings
- Change detection and persistence hand-off
"""
