"""Business logic services package.

Contains the engine's core logic: currency conversion, override
resolution, draft sessions for every editor surface, reconciliation of
location and staff data, change detection and the persistence hand-off.
"""
