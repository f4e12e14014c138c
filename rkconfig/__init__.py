"""RK keyboard configurator core.

Device-scoped configuration and profile persistence for RK-style USB
keyboards. The UI layer and the HID transport live elsewhere.
"""

__version__ = "0.1.0"
