"""
===============================================================================
SRP TOOLKIT - Core Utilities
===============================================================================
Shared constants and geometry helpers used by the dynamics models.

Modules:
    constants -- Physical and astronomical constants (SI units)
    frames    -- Rotation matrices, quaternion rotation, sphere sampling
===============================================================================
"""
